from __future__ import annotations

from datetime import date, datetime, time


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_clock(value: str) -> time:
    """Parse HH:MM or HH:MM:SS into time."""
    v = (value or "").strip()
    fmt = "%H:%M:%S" if v.count(":") == 2 else "%H:%M"
    return datetime.strptime(v, fmt).time()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def school_day_of_week(day: date) -> int:
    """Day number as stored in attendance_schedules: 0 = Sunday ... 6 = Saturday."""
    return (day.weekday() + 1) % 7


def minutes_between(start: time, end: time) -> int:
    """Whole minutes from start to end on the same day, rounded up."""
    delta = (end.hour * 3600 + end.minute * 60 + end.second) - (
        start.hour * 3600 + start.minute * 60 + start.second
    )
    return -(-delta // 60)
