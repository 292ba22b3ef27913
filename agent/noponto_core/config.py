"""
Paths, logging setup, settings load/save, safe_print.
"""

import os
import json
import sys
import logging
from pathlib import Path

from .constants import (
    API_BASE_URL, API_TIMEOUT_SEC, POLL_INTERVAL_SEC,
    TARGET_MINUTES, WARNING_BAND_MIN,
)


# ─── Paths ───────────────────────────────────────────────────────
# One settings/credential store per user. NOPONTO_HOME overrides the
# location (used by tests and portable installs).
_FOLDER_NAME = "NoPonto"

if os.environ.get("NOPONTO_HOME"):
    BASE_DIR = Path(os.environ["NOPONTO_HOME"])
elif sys.platform == "win32":
    BASE_DIR = Path(os.environ.get("APPDATA", Path.home())) / _FOLDER_NAME
else:
    BASE_DIR = Path.home() / ".noponto"

BASE_DIR.mkdir(parents=True, exist_ok=True)

SETTINGS_FILE = BASE_DIR / "settings.json"
STORE_FILE = BASE_DIR / "noponto.dat"
KEY_FILE = BASE_DIR / "vault.key"
LOG_FILE = BASE_DIR / "noponto.log"


# ─── Safe print (no crash when --noconsole) ──────────────────────

def safe_print(*args, **kwargs):
    try:
        print(*args, **kwargs)
    except Exception:
        pass


# ─── Logging ─────────────────────────────────────────────────────

try:
    if LOG_FILE.exists() and LOG_FILE.stat().st_size > 1_000_000:
        LOG_FILE.write_text("")
except OSError:
    pass

logging.basicConfig(
    filename=str(LOG_FILE),
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    encoding="utf-8",
)
log = logging.getLogger("noponto")

console_handler = logging.StreamHandler(sys.stdout)
console_handler.setLevel(logging.INFO)
console_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
log.addHandler(console_handler)


# ─── Settings ────────────────────────────────────────────────────

def load_settings():
    """Load settings overrides from disk. Returns dict (empty if none)."""
    if SETTINGS_FILE.exists():
        try:
            with open(SETTINGS_FILE, "r", encoding="utf-8") as f:
                data = json.load(f)
            if isinstance(data, dict):
                return data
            log.warning("Ignoring settings file %s: not a JSON object", SETTINGS_FILE)
        except (json.JSONDecodeError, IOError) as e:
            log.warning("Ignoring unreadable settings file %s: %s", SETTINGS_FILE, e)
    return {}


def server_url(settings):
    return settings.get("serverUrl", API_BASE_URL).rstrip("/")


def api_timeout(settings):
    return float(settings.get("apiTimeoutSec", API_TIMEOUT_SEC))


def poll_interval(settings):
    return float(settings.get("pollIntervalSec", POLL_INTERVAL_SEC))


def target_minutes(settings):
    return int(settings.get("targetMinutes", TARGET_MINUTES))


def warning_band(settings):
    return int(settings.get("warningBandMin", WARNING_BAND_MIN))
