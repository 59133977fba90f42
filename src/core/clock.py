
from __future__ import annotations
from datetime import datetime, timedelta
from typing import Protocol

from .datetime_utils import get_day


class Clock(Protocol):
    """Source of the current local time; "today" is the newest day on the graph."""

    def now(self) -> datetime: ...

    def today(self) -> int: ...


class LocalClock:
    """Wall clock of the machine, in local time."""

    def now(self) -> datetime:
        return datetime.now()

    def today(self) -> int:
        return get_day(self.now())


class FixedClock:
    """Clock frozen at a given moment; used by tests and replays."""

    def __init__(self, now: datetime) -> None:
        self._now = now

    def now(self) -> datetime:
        return self._now

    def today(self) -> int:
        return get_day(self._now)

    def advance(self, **kwargs) -> None:
        self._now = self._now + timedelta(**kwargs)


__all__ = ["Clock", "FixedClock", "LocalClock"]
