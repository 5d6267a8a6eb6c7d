from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import AbstractSet, Optional

from ..common.datetime_utils import iter_days
from ..core.constants import DEFAULT_WORK_DAYS, FULL_DAY, HALF_DAY


def calculate_working_days(
    start_date: date,
    end_date: date,
    half_day_start: bool = False,
    half_day_end: bool = False,
    work_days: AbstractSet[int] = DEFAULT_WORK_DAYS,
    holidays: Optional[AbstractSet[date]] = None,
) -> Decimal:
    """Count leave days between two dates, both inclusive.

    Only the employee's work days (ISO weekday, 1=Mon..7=Sun) that are not
    holidays count. A half-day flag halves the first or last day when that day
    counts. For a single-day range only the start flag applies.
    """
    if start_date > end_date:
        return Decimal("0")
    holidays = holidays or frozenset()

    total = Decimal("0")
    for day in iter_days(start_date, end_date):
        if day.isoweekday() not in work_days or day in holidays:
            continue
        if start_date == end_date:
            is_half = half_day_start
        else:
            is_half = (day == start_date and half_day_start) or (day == end_date and half_day_end)
        total += HALF_DAY if is_half else FULL_DAY
    return total
