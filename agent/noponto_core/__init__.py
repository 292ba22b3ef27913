"""
noponto_core — Work-day quota monitor + time-card integration
=============================================================
Architecture: one monitor thread per session, Tk main loop for the UI.

  constants.py    → Version, quota/poll thresholds, API defaults, strings, theme
  config.py       → Paths, logging, settings load/save, helpers
  errors.py       → ParseError, CryptoError, StorageError, ApiError, ...
  timemath.py     → HH:MM parsing, end-of-day computation, display helpers
  state.py        → SessionStatus + SessionRegistry (single source of truth)
  notifier.py     → NotificationSink boundary, LoggingSink, CompositeSink
  monitor.py      → SessionMonitor thread (warning / completion alerts)
  session.py      → SessionManager (start / status / stop)
  vault.py        → Encrypted credential store (AES-256-GCM)
  http_client.py  → HTTP session with pooling + CA bundle
  api.py          → TimeCardClient (today's clock records)
  popup.py        → OverlaySink (Tk overlay, main-thread drained)
  app.py          → NoPontoApp (Tk window, root.after scheduling)
  runner.py       → main() + auto-restart wrapper
"""
