# backend/services/clock.py
"""
Injectable time source.

Services take a ``Clock`` instead of calling ``datetime.now()`` so ledger
timestamps and code partitions are deterministic under test. Production time
is naive local time: goods codes are partitioned by the local calendar month.
"""
from datetime import datetime, date, timedelta


class Clock:
    def now(self) -> datetime:
        raise NotImplementedError

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now()


class FixedClock(Clock):
    """Clock frozen at a given instant; tests move it with ``set`` / ``advance``."""

    def __init__(self, current: datetime):
        self._current = current

    def now(self) -> datetime:
        return self._current

    def set(self, current: datetime) -> None:
        self._current = current

    def advance(self, **kwargs) -> datetime:
        self._current = self._current + timedelta(**kwargs)
        return self._current
