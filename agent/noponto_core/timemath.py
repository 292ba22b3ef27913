"""
Work-day arithmetic: parse HH:MM inputs, compute the expected end of the
work day from the first period and the start of the second, and a few
display helpers.

All functions are pure. "today" and "now" are parameters so callers and
tests control the calendar day.
"""

import math
import re
from dataclasses import dataclass
from datetime import datetime, date, time, timedelta
from typing import Optional, Tuple, Dict, List

from .constants import TARGET_MINUTES, TIME_FORMAT
from .errors import ParseError
from .state import SessionStatus

_HHMM = re.compile(r"^\d{1,2}:\d{2}$")

IMPORT_EMPTY = "empty"
IMPORT_TOO_MANY = "too_many"
IMPORT_OK = "imported"


def parse_time_of_day(value: str, field: str = "time") -> time:
    """Parse a strict 24-hour ``HH:MM`` string. Raises ParseError."""
    text = (value or "").strip()
    if not _HHMM.match(text):
        raise ParseError(field, value)
    try:
        return datetime.strptime(text, TIME_FORMAT).time()
    except ValueError:
        raise ParseError(field, value) from None


@dataclass(frozen=True)
class WorkPeriodInput:
    """The three clock readings a session is started from (raw strings)."""
    start1: str = ""
    end1: str = ""
    start2: str = ""

    def parse(self) -> Tuple[time, time, time]:
        return (
            parse_time_of_day(self.start1, "start1"),
            parse_time_of_day(self.end1, "end1"),
            parse_time_of_day(self.start2, "start2"),
        )


@dataclass(frozen=True)
class SessionPlan:
    end_instant: datetime
    period1_minutes: int
    remaining_minutes: int
    initial_status: SessionStatus


def compute_session_plan(start1: str, end1: str, start2: str,
                         target_minutes: int = TARGET_MINUTES,
                         today: Optional[date] = None) -> SessionPlan:
    """
    endInstant = start2 + (target - (end1 - start1)), all on ``today``.

    Nothing is clamped: a first period longer than the target gives a
    negative remaining budget and an end instant before start2.
    """
    t1, t2, t3 = WorkPeriodInput(start1, end1, start2).parse()
    day = today or date.today()

    start1_dt = datetime.combine(day, t1)
    end1_dt = datetime.combine(day, t2)
    start2_dt = datetime.combine(day, t3)

    period1_minutes = whole_minutes(end1_dt - start1_dt)
    remaining = target_minutes - period1_minutes
    end_instant = start2_dt + timedelta(minutes=remaining)

    status = SessionStatus(
        remaining_minutes=remaining,
        is_complete=False,
        end_time=end_instant.strftime(TIME_FORMAT),
    )
    return SessionPlan(end_instant, period1_minutes, remaining, status)


def whole_minutes(delta: timedelta) -> int:
    """Whole minutes in ``delta``, truncated toward zero."""
    return math.trunc(delta / timedelta(minutes=1))


def minutes_until(end_instant: datetime, now: datetime) -> int:
    return whole_minutes(end_instant - now)


def validate_time_sequence(start1: str, end1: str, start2: str) -> Tuple[bool, Dict[str, bool]]:
    """
    Advisory ordering checks for the input form.

    start1 < end1, start2 > end1, start2 distinct from start1.
    Incomplete fields are skipped; the result is only valid when all three
    parse and no check failed. Starting a session does NOT call this.
    """
    parsed = {}
    for field, value in (("start1", start1), ("end1", end1), ("start2", start2)):
        try:
            t = parse_time_of_day(value, field)
            parsed[field] = t.hour * 60 + t.minute
        except ParseError:
            pass

    errors = {}
    s1, e1, s2 = parsed.get("start1"), parsed.get("end1"), parsed.get("start2")

    if s1 is not None and e1 is not None and s1 >= e1:
        errors["start1"] = True
        errors["end1"] = True
    if s2 is not None:
        if s1 is not None and s2 == s1:
            errors["start2"] = True
        if e1 is not None and s2 <= e1:
            errors["start2"] = True
            errors["end1"] = True

    is_valid = len(parsed) == 3 and not errors
    return is_valid, errors


@dataclass(frozen=True)
class ClockImport:
    outcome: str
    inputs: WorkPeriodInput


def inputs_from_clock_records(times: List[str],
                              current: Optional[WorkPeriodInput] = None) -> ClockImport:
    """
    Fill the period inputs from today's clock records, in order.

    No records → ``empty``; four or more means the day is already fully
    clocked → ``too_many``. In both cases ``current`` is returned as-is.
    """
    current = current or WorkPeriodInput()
    if not times:
        return ClockImport(IMPORT_EMPTY, current)
    if len(times) >= 4:
        return ClockImport(IMPORT_TOO_MANY, current)

    fields = [current.start1, current.end1, current.start2]
    for i, value in enumerate(times):
        fields[i] = value
    return ClockImport(IMPORT_OK, WorkPeriodInput(*fields))


def format_minutes(minutes: int) -> str:
    """``135`` → ``"2h 15m"``. Negative values render as ``"0h 0m"``."""
    if minutes <= 0:
        return "0h 0m"
    return f"{minutes // 60}h {minutes % 60}m"


def progress_percent(remaining_minutes: int, target_minutes: int = TARGET_MINUTES) -> float:
    """Share of the target already worked, capped at 100."""
    if target_minutes <= 0:
        return 100.0
    worked = target_minutes - remaining_minutes
    if worked >= target_minutes:
        return 100.0
    return max(worked, 0) / target_minutes * 100
