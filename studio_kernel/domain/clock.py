"""
Clock -- where the services get "now" from.

Services take a Clock in their constructor and never read the wall clock
themselves, so stamping and "this month" reports can be pinned in tests.
The engines take no clock: every date they need arrives as an argument.
"""

from abc import ABC, abstractmethod
from datetime import UTC, date, datetime, timedelta


class Clock(ABC):

    @abstractmethod
    def now(self) -> datetime:
        """Current instant, timezone-aware."""

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class DeterministicClock(Clock):
    """
    A clock that only moves when told to.

    Starts at ``start`` (noon UTC on 2025-01-01 when omitted) and returns
    that instant until ``advance`` or ``set_time`` is called.
    """

    def __init__(self, start: datetime | None = None):
        self._current = start or datetime(2025, 1, 1, 12, tzinfo=UTC)

    def now(self) -> datetime:
        return self._current

    def set_time(self, instant: datetime) -> None:
        self._current = instant

    def advance(self, **delta: float) -> None:
        """Move forward, e.g. ``advance(days=31)``. Defaults to one second."""
        self._current += timedelta(**delta) if delta else timedelta(seconds=1)
