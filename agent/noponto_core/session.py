"""
SessionManager — start / query / stop the work-day session.

Owns at most one SessionMonitor. Starting a new session cancels the old
monitor and discards its registry entry before the new one is spawned.
"""

import threading
import uuid
from datetime import datetime

from .config import log, poll_interval, target_minutes, warning_band
from .monitor import SessionMonitor, DONE
from .notifier import LoggingSink
from .state import SessionRegistry
from .timemath import compute_session_plan


class SessionManager:

    def __init__(self, registry=None, sink=None, clock=datetime.now,
                 settings=None, autostart=True):
        settings = settings or {}
        self.registry = registry or SessionRegistry()
        self._sink = sink or LoggingSink()
        self._clock = clock
        self._interval = poll_interval(settings)
        self._target = target_minutes(settings)
        self._band = warning_band(settings)
        self._autostart = autostart
        self._lock = threading.Lock()
        self._monitor = None
        self._listeners = []
        self._warning_listeners = []

    @property
    def monitor(self):
        return self._monitor

    @property
    def is_monitoring(self):
        m = self._monitor
        return m is not None and not m.cancelled and m.state != DONE

    def add_completion_listener(self, callback):
        """``callback(session_id)`` runs on the monitor thread when the day is done."""
        self._listeners.append(callback)

    def add_warning_listener(self, callback):
        """``callback(session_id, remaining_minutes)`` runs on the monitor thread
        once, when the session enters the warning band."""
        self._warning_listeners.append(callback)

    def start_session(self, start1, end1, start2):
        """
        Parse inputs, publish the initial status, spawn the monitor.
        Raises ParseError before touching any state.
        """
        plan = compute_session_plan(
            start1, end1, start2,
            target_minutes=self._target,
            today=self._clock().date(),
        )
        session_id = uuid.uuid4().hex[:12]

        with self._lock:
            self._stop_locked()
            self.registry.register(session_id, plan.initial_status)
            self._monitor = SessionMonitor(
                session_id, plan.end_instant, self.registry, self._sink,
                clock=self._clock, interval=self._interval,
                warning_band=self._band, on_complete=self._fire_complete,
                on_warning=self._fire_warning,
            )
            if self._autostart:
                self._monitor.start()

        log.info(
            "Session %s started: %s-%s, %s → end %s (period1=%d min, remaining=%d min)",
            session_id, start1, end1, start2, plan.initial_status.end_time,
            plan.period1_minutes, plan.remaining_minutes,
        )
        return session_id

    def get_status(self):
        """Current SessionStatus, or None when there is no active session."""
        return self.registry.snapshot()

    def stop_session(self):
        """Cancel the running monitor and clear its status. Returns True if one was running."""
        with self._lock:
            return self._stop_locked()

    def _stop_locked(self):
        old = self._monitor
        if old is None:
            return False
        old.cancel()
        self.registry.discard(old.session_id)
        self._monitor = None
        log.info("Session %s stopped", old.session_id)
        return True

    def _fire_complete(self, session_id):
        for cb in list(self._listeners):
            try:
                cb(session_id)
            except Exception as e:
                log.warning("work_complete listener error: %s", e)

    def _fire_warning(self, session_id, remaining):
        for cb in list(self._warning_listeners):
            try:
                cb(session_id, remaining)
            except Exception as e:
                log.warning("work_almost_complete listener error: %s", e)
