"""Clock used to stamp appointment records.

All timestamps are naive facility-local datetimes, the same representation
stored in ``appointments.appointment_date``.
"""

from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        ...


class SystemClock:
    """Reads the host clock in local time."""

    def now(self) -> datetime:
        return datetime.now()


system_clock = SystemClock()


def get_clock() -> Clock:
    return system_clock
