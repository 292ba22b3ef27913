"""
Tests for SessionManager: start / query / stop and single-owner monitoring.
"""

from datetime import datetime

import pytest

from noponto_core.errors import ParseError
from noponto_core.monitor import CANCELLED
from noponto_core.notifier import KIND_COMPLETE, KIND_WARNING
from noponto_core.session import SessionManager

from tests.conftest import FakeClock


@pytest.fixture
def day_clock():
    return FakeClock(datetime(2026, 10, 18, 13, 0))


@pytest.fixture
def manager(day_clock, sink):
    return SessionManager(sink=sink, clock=day_clock, autostart=False)


class TestStartSession:

    def test_initial_status(self, manager):
        manager.start_session("08:00", "12:00", "13:00")
        status = manager.get_status()
        assert status.end_time == "17:00"
        assert status.remaining_minutes == 240
        assert status.is_complete is False
        assert manager.is_monitoring

    def test_parse_error_spawns_nothing(self, manager):
        with pytest.raises(ParseError):
            manager.start_session("25:99", "12:00", "13:00")
        assert manager.get_status() is None
        assert manager.monitor is None
        assert not manager.is_monitoring

    def test_parse_error_keeps_previous_session(self, manager):
        manager.start_session("08:00", "12:00", "13:00")
        first = manager.monitor
        with pytest.raises(ParseError):
            manager.start_session("08:00", "xx", "13:00")
        assert manager.monitor is first
        assert manager.get_status().end_time == "17:00"

    def test_new_session_cancels_previous(self, manager, day_clock, sink):
        manager.start_session("08:00", "12:00", "13:00")
        old = manager.monitor
        manager.start_session("08:00", "12:00", "13:30")
        new = manager.monitor

        assert old.state == CANCELLED
        assert new is not old
        assert manager.get_status().end_time == "17:30"

        # The superseded monitor can no longer write or alert.
        day_clock.now = datetime(2026, 10, 18, 17, 0)
        assert old.tick() is False
        assert manager.get_status().end_time == "17:30"
        assert sink.notifications == []

    def test_first_tick_publishes_live_remaining(self, manager, day_clock):
        manager.start_session("08:00", "12:00", "13:00")
        day_clock.now = datetime(2026, 10, 18, 16, 0)
        manager.monitor.tick()
        assert manager.get_status().remaining_minutes == 60

    def test_settings_override_target(self, day_clock, sink):
        manager = SessionManager(sink=sink, clock=day_clock, autostart=False,
                                 settings={"targetMinutes": 360})
        manager.start_session("08:00", "12:00", "13:00")
        assert manager.get_status().end_time == "15:00"


class TestStopSession:

    def test_stop_clears_status(self, manager):
        manager.start_session("08:00", "12:00", "13:00")
        monitor = manager.monitor
        assert manager.stop_session() is True
        assert manager.get_status() is None
        assert monitor.state == CANCELLED
        assert not manager.is_monitoring

    def test_stop_without_session(self, manager):
        assert manager.stop_session() is False


class TestCompletion:

    def test_full_day_alerts_once_each(self, manager, day_clock, sink):
        completed = []
        manager.add_completion_listener(completed.append)
        session_id = manager.start_session("08:00", "12:00", "13:00")

        day_clock.now = datetime(2026, 10, 18, 16, 55)
        while manager.monitor.tick():
            day_clock.advance(minutes=1)

        assert sink.kinds() == [KIND_WARNING, KIND_COMPLETE]
        assert completed == [session_id]
        assert manager.get_status().is_complete is True
        assert not manager.is_monitoring

    def test_listener_error_is_contained(self, manager, day_clock, sink):
        def boom(_):
            raise RuntimeError("listener failed")
        seen = []
        manager.add_completion_listener(boom)
        manager.add_completion_listener(seen.append)
        manager.start_session("08:00", "12:00", "13:00")
        day_clock.now = datetime(2026, 10, 18, 17, 0)
        manager.monitor.tick()
        assert len(seen) == 1

    def test_autostart_thread(self, day_clock, sink):
        manager = SessionManager(sink=sink, clock=day_clock, settings={"pollIntervalSec": 0.01})
        day_clock.now = datetime(2026, 10, 18, 18, 0)
        manager.start_session("08:00", "12:00", "13:00")
        manager.monitor.join(timeout=2)
        assert manager.get_status().is_complete is True
        assert sink.kinds() == [KIND_COMPLETE]


class TestWarningListeners:

    def test_warning_listener_fires_once(self, manager, day_clock):
        warned = []
        manager.add_warning_listener(lambda sid, m: warned.append((sid, m)))
        session_id = manager.start_session("08:00", "12:00", "13:00")

        day_clock.now = datetime(2026, 10, 18, 16, 55)
        while manager.monitor.tick():
            day_clock.advance(minutes=1)

        assert warned == [(session_id, 3)]

    def test_listener_error_is_contained(self, manager, day_clock, sink):
        def boom(sid, remaining):
            raise RuntimeError("listener failed")
        seen = []
        manager.add_warning_listener(boom)
        manager.add_warning_listener(lambda sid, m: seen.append(m))
        manager.start_session("08:00", "12:00", "13:00")
        day_clock.now = datetime(2026, 10, 18, 16, 58)
        assert manager.monitor.tick() is True
        assert seen == [2]
        assert sink.kinds() == [KIND_WARNING]

    def test_stopped_session_fires_no_listeners(self, manager, day_clock, sink):
        events = []
        manager.add_warning_listener(lambda sid, m: events.append("warning"))
        manager.add_completion_listener(lambda sid: events.append("complete"))
        manager.start_session("08:00", "12:00", "13:00")
        monitor = manager.monitor
        manager.stop_session()
        day_clock.now = datetime(2026, 10, 18, 17, 0)
        assert monitor.tick() is False
        assert events == []
        assert sink.notifications == []
