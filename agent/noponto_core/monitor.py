"""
SessionMonitor — background thread that watches one work session.

Every poll interval it recomputes the minutes left until the expected end
of the day, publishes the status to the SessionRegistry and, through the
NotificationSink, alerts once when entering the warning band and once on
completion. Waiting is done on a threading.Event so cancel() wakes the
thread immediately.
"""

import threading
from datetime import datetime

from .constants import (
    POLL_INTERVAL_SEC, WARNING_BAND_MIN, TIME_FORMAT,
    WARNING_TITLE, WARNING_MESSAGE, COMPLETE_TITLE, COMPLETE_MESSAGE,
)
from .config import log
from .notifier import Notification, KIND_WARNING, KIND_COMPLETE, deliver, surface
from .state import SessionStatus
from .timemath import minutes_until

RUNNING = "running"
COMPLETING = "completing"
DONE = "done"
CANCELLED = "cancelled"


class SessionMonitor(threading.Thread):
    """
    Lifecycle:
      start()   → thread runs tick() every ``interval`` seconds
      tick()    → one poll; returns False once the session is complete
      cancel()  → stops the loop; no further status writes or alerts
    """

    def __init__(self, session_id, end_instant, registry, sink,
                 clock=datetime.now, interval=POLL_INTERVAL_SEC,
                 warning_band=WARNING_BAND_MIN, on_complete=None, on_warning=None):
        super().__init__(name=f"monitor-{session_id}", daemon=True)
        self.session_id = session_id
        self.end_instant = end_instant
        self._registry = registry
        self._sink = sink
        self._clock = clock
        self._interval = interval
        self._warning_band = warning_band
        self._on_complete = on_complete
        self._on_warning = on_warning
        self._cancel_event = threading.Event()
        # Reentrant: a sink or listener may cancel from the monitor thread.
        self._alert_lock = threading.RLock()
        self.state = RUNNING
        self.warnings_sent = 0
        self.completions_sent = 0

    @property
    def cancelled(self):
        return self._cancel_event.is_set()

    def cancel(self):
        with self._alert_lock:
            self._cancel_event.set()
            if self.state != DONE:
                self.state = CANCELLED
        log.info("Monitor %s cancelled", self.session_id)

    def run(self):
        log.info(
            "Monitor %s started (end=%s, interval=%ss)",
            self.session_id, self.end_instant.strftime(TIME_FORMAT), self._interval,
        )
        while not self.cancelled:
            try:
                keep_going = self.tick()
            except Exception as e:
                log.error("Monitor %s tick error: %s", self.session_id, e, exc_info=True)
                keep_going = True
            if not keep_going:
                break
            if self._cancel_event.wait(self._interval):
                break
        log.info("Monitor %s stopped (%s)", self.session_id, self.state)

    def tick(self):
        """One poll iteration. Returns whether the loop should continue."""
        if self.cancelled or self.state == DONE:
            return False

        remaining = minutes_until(self.end_instant, self._clock())
        status = SessionStatus(
            remaining_minutes=max(remaining, 0),
            is_complete=remaining <= 0,
            end_time=self.end_instant.strftime(TIME_FORMAT),
        )
        in_band = 0 < remaining <= self._warning_band
        first_warning = self._registry.publish(self.session_id, status, mark_warned=in_band)
        if self.cancelled:
            return False

        if remaining <= 0:
            self._complete()
            return False

        if first_warning:
            self._warn(remaining)
        return True

    def _alert(self, notification):
        """
        Deliver ``notification`` unless cancelled. Holds the alert lock, so
        once cancel() has returned no alert from this monitor can start.
        """
        with self._alert_lock:
            if self.cancelled:
                return False
            deliver(self._sink, notification)
            surface(self._sink)
            return True

    def _notify_listener(self, listener, *args):
        if listener is None:
            return
        try:
            listener(self.session_id, *args)
        except Exception as e:
            log.warning("Monitor %s listener failed: %s", self.session_id, e)

    def _warn(self, remaining):
        log.info("Work almost complete: %d minutes remaining", remaining)
        sent = self._alert(Notification(
            KIND_WARNING, WARNING_TITLE,
            WARNING_MESSAGE.format(minutes=remaining),
            remaining_minutes=remaining,
        ))
        if sent:
            self.warnings_sent += 1
            self._notify_listener(self._on_warning, remaining)

    def _complete(self):
        self.state = COMPLETING
        log.info("Work complete! Notifying user (session %s)", self.session_id)
        sent = self._alert(Notification(
            KIND_COMPLETE, COMPLETE_TITLE, COMPLETE_MESSAGE, remaining_minutes=0,
        ))
        if not sent:
            return
        self.completions_sent += 1
        self._notify_listener(self._on_complete)
        self.state = DONE
