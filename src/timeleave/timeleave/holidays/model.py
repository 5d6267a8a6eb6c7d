from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class PublicHoliday:
    """Ngày nghỉ lễ. state_code=None nghĩa là áp dụng toàn quốc."""

    holiday_date: date
    name: str
    state_code: Optional[str] = None
    is_recurring: bool = True

    def applies_to(self, state_code: Optional[str]) -> bool:
        return self.state_code is None or self.state_code == state_code

    def in_year(self, year: int) -> "PublicHoliday":
        """Recurring holidays are stored once and re-dated into the requested year."""
        if not self.is_recurring or self.holiday_date.year == year:
            return self
        try:
            moved = self.holiday_date.replace(year=year)
        except ValueError:
            # 29 Feb in a non-leap year
            moved = self.holiday_date.replace(year=year, day=28)
        return PublicHoliday(holiday_date=moved, name=self.name, state_code=self.state_code, is_recurring=True)
