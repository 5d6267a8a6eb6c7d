from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Iterator, Protocol, Tuple


class Clock(Protocol):
    """Injectable "now" source."""

    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock:
    """Current local time.

    Note: Wrapped so tests can swap in a frozen clock.
    """

    def now(self) -> datetime:
        return datetime.now()


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """Half-open [start, end) covering one calendar day."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def range_bounds(start_date: date, end_date: date) -> Tuple[datetime, datetime]:
    start, _ = day_bounds(start_date)
    _, end = day_bounds(end_date)
    return start, end


def iter_days(start_date: date, end_date: date) -> Iterator[date]:
    current = start_date
    while current <= end_date:
        yield current
        current += timedelta(days=1)


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole elapsed minutes; partial minutes are dropped."""
    return int((end - start).total_seconds() // 60)


def format_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
