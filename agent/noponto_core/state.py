"""
SessionStatus and SessionRegistry — single source of truth for work-day progress.

Monitor threads write, the UI thread and status queries read. Every access
goes through one lock; readers get the frozen SessionStatus, never a live
reference.
"""

import threading
from dataclasses import dataclass, asdict
from typing import Optional


@dataclass(frozen=True)
class SessionStatus:
    remaining_minutes: int
    is_complete: bool
    end_time: str

    def to_dict(self):
        return asdict(self)


@dataclass
class _Entry:
    status: SessionStatus
    warned: bool = False


class SessionRegistry:
    """
    Session id → latest status. At most one id is "active" (the one status
    queries report). Writes for ids that were discarded are dropped, so a
    monitor that lost its session can't overwrite the new one.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entries = {}
        self._active_id = None

    def register(self, session_id, status):
        """Add a session and make it the one status queries report."""
        with self._lock:
            self._entries[session_id] = _Entry(status)
            self._active_id = session_id

    def discard(self, session_id):
        with self._lock:
            self._entries.pop(session_id, None)
            if self._active_id == session_id:
                self._active_id = None

    def publish(self, session_id, status, mark_warned=False):
        """
        Replace the session's status. Returns True when ``mark_warned``
        was requested and this call is the one that set the flag.
        """
        with self._lock:
            entry = self._entries.get(session_id)
            if entry is None:
                return False
            entry.status = status
            if mark_warned and not entry.warned:
                entry.warned = True
                return True
            return False

    def snapshot(self, session_id=None) -> Optional[SessionStatus]:
        """Latest status for ``session_id`` (default: the active session)."""
        with self._lock:
            sid = self._active_id if session_id is None else session_id
            entry = self._entries.get(sid)
            return entry.status if entry else None
