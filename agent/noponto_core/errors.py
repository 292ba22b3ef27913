"""
Exception classes for time parsing, the credential vault, storage,
the time-card API and notification delivery.
"""


class NoPontoError(Exception):
    """Base class for every error raised by noponto_core."""


class ParseError(NoPontoError):
    """A time-of-day input is not a valid 24-hour HH:MM value."""

    def __init__(self, field, value):
        super().__init__(f"Error parsing {field}: {value!r} is not a valid HH:MM time")
        self.field = field
        self.value = value


class CryptoError(NoPontoError):
    """Cipher construction, key handling or encryption failed."""


class DecryptionError(CryptoError):
    """A stored blob could not be decoded, authenticated or decrypted.

    ``reason`` is one of ``malformed_base64``, ``too_short``,
    ``authentication_failed`` or ``invalid_utf8``.
    """

    def __init__(self, reason, message):
        super().__init__(message)
        self.reason = reason


class StorageError(NoPontoError):
    """The persistent key-value store could not be read or written."""


class ConfigError(NoPontoError):
    """Credential JSON is not an object or misses a required field."""


class ApiError(NoPontoError):
    """Non-success HTTP status or transport failure talking to the time-card service.

    ``status_code`` is None for transport failures (timeout, DNS, TLS).
    """

    def __init__(self, message, status_code=None, body=""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class NotificationDeliveryError(NoPontoError):
    """A notification sink failed to show an alert or surface the window."""
