"""
NotificationSink — the boundary between the monitor and whatever shows
alerts to the user (Tk overlay, log only, tests).

The monitor never talks to a window directly; it calls ``deliver`` and
``surface``, which swallow and log every failure.
"""

from dataclasses import dataclass
from typing import Optional

from .config import log
from .errors import NotificationDeliveryError

KIND_WARNING = "warning"
KIND_COMPLETE = "complete"
KIND_TEST = "test"


@dataclass(frozen=True)
class Notification:
    kind: str
    title: str
    message: str
    remaining_minutes: Optional[int] = None


class NotificationSink:
    """Base sink. Subclasses show the alert and bring the main window forward."""

    def notify(self, notification):
        raise NotImplementedError

    def surface_window(self):
        pass


class LoggingSink(NotificationSink):
    """Headless sink: alerts go to the log only."""

    def notify(self, notification):
        log.info("[%s] %s — %s", notification.kind, notification.title, notification.message)


class CompositeSink(NotificationSink):
    """Fans out to several sinks. Every child runs even if an earlier one fails."""

    def __init__(self, *sinks):
        self._sinks = list(sinks)

    def notify(self, notification):
        self._each(lambda s: s.notify(notification))

    def surface_window(self):
        self._each(lambda s: s.surface_window())

    def _each(self, call):
        failures = []
        for sink in self._sinks:
            try:
                call(sink)
            except Exception as e:
                failures.append(f"{type(sink).__name__}: {e}")
        if failures:
            raise NotificationDeliveryError("; ".join(failures))


def deliver(sink, notification):
    """Fire-and-forget notify. Returns True on success, never raises."""
    try:
        sink.notify(notification)
        return True
    except Exception as e:
        log.warning("Notification '%s' not delivered: %s", notification.kind, e)
        return False


def surface(sink):
    """Fire-and-forget window surfacing. Returns True on success, never raises."""
    try:
        sink.surface_window()
        return True
    except Exception as e:
        log.warning("Could not bring main window to front: %s", e)
        return False
