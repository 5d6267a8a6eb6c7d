from __future__ import annotations

from datetime import date
from typing import FrozenSet, List, Optional

from .model import PublicHoliday
from .repository import HolidayCalendar


class HolidayService:
    """Resolves the holiday calendar into concrete dates for one state."""

    def __init__(self, calendar: HolidayCalendar):
        self._calendar = calendar

    def holidays_for_year(self, year: int, state_code: Optional[str] = None) -> List[PublicHoliday]:
        resolved = [
            h.in_year(year)
            for h in self._calendar.list_for_year(year)
            if h.applies_to(state_code)
        ]
        resolved = [h for h in resolved if h.holiday_date.year == year]
        resolved.sort(key=lambda h: h.holiday_date)
        return resolved

    def dates_between(self, start_date: date, end_date: date, state_code: Optional[str] = None) -> FrozenSet[date]:
        if start_date > end_date:
            return frozenset()
        dates = set()
        for year in range(start_date.year, end_date.year + 1):
            for h in self.holidays_for_year(year, state_code):
                if start_date <= h.holiday_date <= end_date:
                    dates.add(h.holiday_date)
        return frozenset(dates)
