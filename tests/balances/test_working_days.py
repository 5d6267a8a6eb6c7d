from datetime import date
from decimal import Decimal

from src.timeleave.timeleave.balances.working_days import calculate_working_days

WEEKDAYS = frozenset({1, 2, 3, 4, 5})


def test_full_work_week():
    assert calculate_working_days(date(2026, 6, 1), date(2026, 6, 5), False, False, WEEKDAYS, frozenset()) == Decimal("5")


def test_single_half_day():
    assert calculate_working_days(date(2026, 6, 1), date(2026, 6, 1), True, False, WEEKDAYS, frozenset()) == Decimal("0.5")


def test_single_day_ignores_half_day_end():
    assert calculate_working_days(date(2026, 6, 1), date(2026, 6, 1), False, True, WEEKDAYS, frozenset()) == Decimal("1")


def test_weekend_only():
    assert calculate_working_days(date(2026, 6, 6), date(2026, 6, 7), False, False, WEEKDAYS, frozenset()) == Decimal("0")


def test_half_days_at_both_ends():
    assert calculate_working_days(date(2026, 6, 1), date(2026, 6, 5), True, True, WEEKDAYS, frozenset()) == Decimal("4")


def test_half_day_on_non_working_end_day_has_no_effect():
    # Sunday end date is not counted, so the half-day flag changes nothing
    assert calculate_working_days(date(2026, 6, 1), date(2026, 6, 7), False, True, WEEKDAYS, frozenset()) == Decimal("5")


def test_holidays_are_skipped():
    holidays = frozenset({date(2026, 6, 3)})
    assert calculate_working_days(date(2026, 6, 1), date(2026, 6, 5), False, False, WEEKDAYS, holidays) == Decimal("4")


def test_custom_work_days():
    assert calculate_working_days(date(2026, 6, 1), date(2026, 6, 7), False, False, frozenset({1, 2, 3, 4}), frozenset()) == Decimal("4")


def test_inverted_range_is_zero():
    assert calculate_working_days(date(2026, 6, 5), date(2026, 6, 1), False, False, WEEKDAYS, frozenset()) == Decimal("0")
