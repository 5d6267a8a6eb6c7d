from __future__ import annotations

import dataclasses
from datetime import date
from decimal import Decimal

import pytest

from src.timeleave.timeleave.core.enums import LeaveCategory, LeaveStatus
from src.timeleave.timeleave.core.exceptions import ConflictError
from src.timeleave.timeleave.leave.conflict_guard import ConflictGuard
from src.timeleave.timeleave.leave.model import LeaveRequest


def _request(world, category, start, end, status=LeaveStatus.PENDING, employee_id=2):
    return world.requests_repo.create(
        LeaveRequest(
            request_id=0,
            employee_id=employee_id,
            category=category,
            start_date=start,
            end_date=end,
            total_days=Decimal("1"),
            status=status,
        )
    )


@pytest.fixture
def guard(world):
    return ConflictGuard(world.requests_repo)


def test_touching_ranges_overlap(world, guard):
    existing = _request(world, LeaveCategory.VACATION, date(2026, 7, 1), date(2026, 7, 5))

    found = guard.find_overlapping(2, date(2026, 7, 5), date(2026, 7, 8), LeaveCategory.VACATION)

    assert [r.request_id for r in found] == [existing.request_id]


def test_adjacent_ranges_do_not_overlap(world, guard):
    _request(world, LeaveCategory.VACATION, date(2026, 7, 1), date(2026, 7, 5))

    assert guard.find_overlapping(2, date(2026, 7, 6), date(2026, 7, 10), LeaveCategory.VACATION) == []


def test_enclosing_range_overlaps(world, guard):
    _request(world, LeaveCategory.SICK, date(2026, 7, 3), date(2026, 7, 4))

    assert len(guard.find_overlapping(2, date(2026, 7, 1), date(2026, 7, 10), LeaveCategory.SICK)) == 1


def test_other_categories_are_ignored(world, guard):
    _request(world, LeaveCategory.VACATION, date(2026, 7, 1), date(2026, 7, 5))

    assert guard.find_overlapping(2, date(2026, 7, 1), date(2026, 7, 5), LeaveCategory.BUSINESS_TRIP) == []


@pytest.mark.parametrize("status", [LeaveStatus.REJECTED, LeaveStatus.CANCELLED, LeaveStatus.COMPLETED])
def test_closed_requests_do_not_block(world, guard, status):
    _request(world, LeaveCategory.VACATION, date(2026, 7, 1), date(2026, 7, 5), status=status)

    guard.ensure_no_overlap(2, date(2026, 7, 1), date(2026, 7, 5), LeaveCategory.VACATION)


def test_approved_requests_block(world, guard):
    _request(world, LeaveCategory.VACATION, date(2026, 7, 1), date(2026, 7, 5), status=LeaveStatus.APPROVED)

    with pytest.raises(ConflictError):
        guard.ensure_no_overlap(2, date(2026, 7, 2), date(2026, 7, 2), LeaveCategory.VACATION)


def test_excluded_request_and_other_employees(world, guard):
    own = _request(world, LeaveCategory.VACATION, date(2026, 7, 1), date(2026, 7, 5))
    _request(world, LeaveCategory.VACATION, date(2026, 7, 1), date(2026, 7, 5), employee_id=3)

    assert guard.find_overlapping(2, date(2026, 7, 2), date(2026, 7, 6), LeaveCategory.VACATION, own.request_id) == []


def test_overlap_check_ignores_later_status_changes(world, guard):
    req = _request(world, LeaveCategory.VACATION, date(2026, 7, 1), date(2026, 7, 5))
    world.requests_repo.update(dataclasses.replace(req, status=LeaveStatus.CANCELLED))

    assert guard.find_overlapping(2, date(2026, 7, 1), date(2026, 7, 5), LeaveCategory.VACATION) == []
