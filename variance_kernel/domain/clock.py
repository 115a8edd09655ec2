"""
Time source for everything that stamps or ages a variance.

Comment timestamps, project created/updated stamps, sample due dates and the
default months-elapsed figure for KPIs all come from a Clock handed in by the
caller.  Engines never hold one; they receive plain dates.

SystemClock is the only place wall-clock time is read.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone

_DEFAULT_START = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class Clock(ABC):
    """Source of aware datetimes; ``today()`` is derived from ``now()``."""

    @abstractmethod
    def now(self) -> datetime:
        ...

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Frozen clock for tests and reproducible sample data.

    Time only moves when ``advance()`` is called, so two reads in a row
    return the same instant.
    """

    def __init__(self, start: datetime | None = None):
        self._current = start or _DEFAULT_START

    def now(self) -> datetime:
        return self._current

    def advance(self, seconds: int = 1) -> None:
        self._current += timedelta(seconds=seconds)
