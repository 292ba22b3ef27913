"""
Constants, thresholds, time-card service defaults, display strings, theme.
"""

AGENT_VERSION = "1.2.0"

# ─── Work day ────────────────────────────────────────────────────
TARGET_MINUTES = 8 * 60        # Daily quota: 8 hours
POLL_INTERVAL_SEC = 60         # Monitor recomputes remaining time every minute
WARNING_BAND_MIN = 3           # "Almost done" alert when 0 < remaining <= 3
TIME_FORMAT = "%H:%M"

# ─── Credential vault ────────────────────────────────────────────
NONCE_SIZE = 12                # 96-bit AES-GCM nonce
KEY_SIZE_BITS = 256
VAULT_STORE_KEY = "pontomais_config"
CONFIG_REQUIRED_FIELDS = ("employeeId", "accessToken", "client", "uid", "uuid")

# ─── Time-card service ───────────────────────────────────────────
API_BASE_URL = "https://api.pontomais.com.br"
API_WORK_DAYS_PATH = "/api/time_cards/work_days"
API_TIMEOUT_SEC = 15           # Single attempt, bounded
API_VERSION = "2"

# The service rejects requests that don't look like its own web client.
STATIC_BROWSER_HEADERS = {
    "accept": "application/json, text/plain, */*",
    "accept-language": "pt-BR,pt;q=0.9,en-US;q=0.8,en;q=0.7",
    "origin": "https://app2.pontomais.com.br",
    "referer": "https://app2.pontomais.com.br/",
    "sec-ch-ua": '"Chromium";v="124", "Google Chrome";v="124", "Not-A.Brand";v="99"',
    "sec-ch-ua-mobile": "?0",
    "sec-ch-ua-platform": '"Windows"',
    "sec-fetch-dest": "empty",
    "sec-fetch-mode": "cors",
    "sec-fetch-site": "same-site",
    "user-agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
    ),
}

# ─── Display strings (fixed, pt-BR) ──────────────────────────────
WARNING_TITLE = "⏰ Quase Acabando!"
WARNING_MESSAGE = "Faltam apenas {minutes} minutos para completar sua jornada!"
COMPLETE_TITLE = "\U0001f389 Jornada Completa!"
COMPLETE_MESSAGE = (
    "Parabéns! Você completou suas 8 horas de trabalho. "
    "Tenha um ótimo resto do dia!"
)
TEST_TITLE = "\U0001f9ea Teste de Notificação!"
TEST_MESSAGE = "Esta é uma notificação de teste do NoPonto!"

# ─── Overlay ─────────────────────────────────────────────────────
OVERLAY_AUTO_CLOSE_MS = 8000
OVERLAY_WIDTH = 500
OVERLAY_HEIGHT = 200
STATUS_REFRESH_MS = 1000
SINK_DRAIN_MS = 200

THEME = {
    "bg_window":     "#f8fafc",   # main window background
    "bg_card":       "#ffffff",   # card background
    "primary":       "#3b82f6",   # blue button
    "primary_hover": "#2563eb",   # button hover
    "text_primary":  "#1e293b",   # dark text
    "text_secondary":"#64748b",   # muted text
    "border":        "#e2e8f0",   # borders
    "success":       "#10b981",   # green overlay
    "success_dark":  "#059669",
    "warning":       "#f59e0b",   # amber overlay
    "error":         "#ef4444",   # red
}
