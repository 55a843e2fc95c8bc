# leasehold/domain/clock.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...

    def today(self) -> date: ...


class SystemClock:
    """Wall clock, UTC."""

    def now(self) -> datetime:
        return datetime.utcnow()

    def today(self) -> date:
        return self.now().date()


@dataclass(frozen=True)
class FixedClock:
    instant: datetime

    @classmethod
    def on(cls, day: date) -> "FixedClock":
        return cls(datetime(day.year, day.month, day.day))

    def now(self) -> datetime:
        return self.instant

    def today(self) -> date:
        return self.instant.date()


system_clock = SystemClock()
