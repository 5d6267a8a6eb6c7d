"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

DEFAULT_DAILY_WORK_HOURS = Decimal("8.00")
DEFAULT_WEEKLY_WORK_HOURS = Decimal("40.00")
DEFAULT_DAILY_TARGET_MINUTES = 480
DEFAULT_WORK_DAYS = frozenset({1, 2, 3, 4, 5})
DEFAULT_VACATION_DAYS_PER_YEAR = 30
DEFAULT_VACATION_CARRY_OVER_MAX = 10

HALF_DAY = Decimal("0.5")
FULL_DAY = Decimal("1")
