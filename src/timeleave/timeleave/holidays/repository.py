from __future__ import annotations

from typing import Protocol, Sequence

from .model import PublicHoliday


class HolidayCalendar(Protocol):
    def list_for_year(self, year: int) -> Sequence[PublicHoliday]:
        """Holidays dated in ``year`` plus every recurring holiday, unfiltered by state."""

        raise NotImplementedError
