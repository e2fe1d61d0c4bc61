"""Interval arithmetic for appointment slots.

Appointments occupy the half-open interval ``[start, start + duration)``.
"""

from datetime import datetime, time, timedelta


def interval_end(start: datetime, duration_minutes: int) -> datetime:
    return start + timedelta(minutes=duration_minutes)


def intervals_overlap(
    start_a: datetime, duration_a: int, start_b: datetime, duration_b: int
) -> bool:
    """True when A starts inside B, ends inside B, or contains B.

    Back-to-back slots (A ends exactly when B starts) do not overlap.
    """
    end_a = interval_end(start_a, duration_a)
    end_b = interval_end(start_b, duration_b)
    return start_a < end_b and end_a > start_b


def day_of_week(value: datetime) -> int:
    """Weekday number stored in availability and working-hours rows: 0 is Sunday, 6 is Saturday."""
    return value.isoweekday() % 7


def day_window(start: datetime, duration_minutes: int) -> tuple[time, time] | None:
    """Time-of-day bounds of the interval, or None if it runs past its start day."""
    end = interval_end(start, duration_minutes)
    if end.date() != start.date():
        return None
    return start.time(), end.time()
