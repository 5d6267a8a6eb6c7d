from __future__ import annotations

import threading
import time
from datetime import date, datetime
from decimal import Decimal

import pytest

from src.timeleave.timeleave.core.enums import LeaveCategory, LeaveStatus
from src.timeleave.timeleave.core.exceptions import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)

VACATION = LeaveCategory.VACATION
SICK = LeaveCategory.SICK
TRIP = LeaveCategory.BUSINESS_TRIP


def _vacation(world, start, end, employee_id=2, **kwargs):
    return world.leave.create_request(employee_id, VACATION, start, end, **kwargs)


def _trip(world, start, end, employee_id=2, **kwargs):
    kwargs.setdefault("destination", "Hamburg")
    return world.leave.create_request(employee_id, TRIP, start, end, **kwargs)


class TestCreate:
    def test_vacation_counts_working_days(self, world):
        req = _vacation(world, date(2026, 7, 1), date(2026, 7, 5), notes="Sommer")

        assert req.request_id > 0
        assert req.status == LeaveStatus.PENDING
        assert req.total_days == Decimal("3")
        assert req.notes == "Sommer"
        assert req.created_at == datetime(2026, 6, 1, 8, 0)

    def test_half_days(self, world):
        req = _vacation(world, date(2026, 7, 6), date(2026, 7, 10), half_day_start=True, half_day_end=True)

        assert req.total_days == Decimal("4")
        assert req.is_half_day_start and req.is_half_day_end

    def test_overlapping_vacation_is_rejected(self, world):
        _vacation(world, date(2026, 7, 1), date(2026, 7, 5))

        with pytest.raises(ConflictError):
            _vacation(world, date(2026, 7, 3), date(2026, 7, 10))

        assert _vacation(world, date(2026, 7, 6), date(2026, 7, 10)).total_days == Decimal("5")
        assert len(world.requests_repo.rows) == 2

    def test_different_categories_may_overlap(self, world):
        _vacation(world, date(2026, 7, 1), date(2026, 7, 5))

        trip = _trip(world, date(2026, 7, 2), date(2026, 7, 3))
        sick = world.leave.create_request(2, SICK, date(2026, 7, 1), date(2026, 7, 1))

        assert trip.status == LeaveStatus.PENDING
        assert sick.total_days == Decimal("1")

    def test_vacation_cannot_start_in_the_past(self, world):
        with pytest.raises(ValidationError):
            _vacation(world, date(2026, 5, 29), date(2026, 6, 2))

    def test_sick_leave_may_start_in_the_past(self, world):
        req = world.leave.create_request(2, SICK, date(2026, 5, 28), date(2026, 5, 29))

        assert req.total_days == Decimal("2")

    def test_weekend_only_vacation_is_rejected(self, world):
        with pytest.raises(ValidationError):
            _vacation(world, date(2026, 7, 4), date(2026, 7, 5))

    def test_inverted_range(self, world):
        with pytest.raises(ValidationError):
            _vacation(world, date(2026, 7, 10), date(2026, 7, 6))

    def test_insufficient_balance(self, world):
        world.balances.set_balance(2, 2026, total_days=Decimal("2"))

        with pytest.raises(BadRequestError):
            _vacation(world, date(2026, 7, 1), date(2026, 7, 3))
        assert world.requests_repo.rows == {}

    def test_holidays_follow_employee_state(self, world):
        bavarian = _vacation(world, date(2027, 1, 4), date(2027, 1, 8))
        # Mon-Thu schedule, 6 Jan is not a holiday in NW
        other = _vacation(world, date(2027, 1, 4), date(2027, 1, 8), employee_id=3)

        assert bavarian.total_days == Decimal("4")
        assert other.total_days == Decimal("4")

    def test_unknown_employee(self, world):
        with pytest.raises(NotFoundError):
            _vacation(world, date(2026, 7, 1), date(2026, 7, 3), employee_id=99)

    def test_trip_needs_destination(self, world):
        with pytest.raises(ValidationError):
            world.leave.create_request(2, TRIP, date(2026, 7, 1), date(2026, 7, 2), destination="  ")

    def test_trip_details_are_stored(self, world):
        trip = _trip(
            world,
            date(2026, 7, 1),
            date(2026, 7, 2),
            purpose="Kundentermin",
            estimated_cost="250.00",
            cost_center="CC-100",
        )

        assert trip.destination == "Hamburg"
        assert trip.estimated_cost == Decimal("250.00")
        assert trip.cost_center == "CC-100"

    def test_unsupported_detail_field(self, world):
        with pytest.raises(ValidationError, match="destination"):
            _vacation(world, date(2026, 7, 1), date(2026, 7, 3), destination="Rom")


class TestDecisions:
    def test_approve_books_vacation_days(self, world):
        req = _vacation(world, date(2026, 7, 1), date(2026, 7, 5))

        approved = world.leave.approve(req.request_id, 1)

        assert approved.status == LeaveStatus.APPROVED
        assert approved.approver_id == 1
        assert world.balances.get_balance(2, 2026).used_days == Decimal("3")

    def test_cannot_approve_own_request(self, world):
        req = _vacation(world, date(2026, 7, 1), date(2026, 7, 5))

        with pytest.raises(ForbiddenError):
            world.leave.approve(req.request_id, 2)
        assert world.leave.get_request(req.request_id).status == LeaveStatus.PENDING

    def test_second_decision_is_rejected(self, world):
        req = _vacation(world, date(2026, 7, 1), date(2026, 7, 5))
        world.leave.approve(req.request_id, 1)

        with pytest.raises(BadRequestError):
            world.leave.approve(req.request_id, 1)
        with pytest.raises(BadRequestError):
            world.leave.reject(req.request_id, 1, "zu spaet")
        assert world.balances.get_balance(2, 2026).used_days == Decimal("3")

    def test_approval_rechecks_balance(self, world):
        world.balances.set_balance(2, 2026, total_days=Decimal("5"))
        first = _vacation(world, date(2026, 7, 1), date(2026, 7, 3))
        second = _vacation(world, date(2026, 7, 6), date(2026, 7, 8))
        world.leave.approve(first.request_id, 1)

        with pytest.raises(BadRequestError):
            world.leave.approve(second.request_id, 1)

        assert world.leave.get_request(second.request_id).status == LeaveStatus.PENDING
        assert world.balances.get_balance(2, 2026).remaining_days == Decimal("2")

    def test_reject_keeps_reason_and_balance(self, world):
        req = _vacation(world, date(2026, 7, 1), date(2026, 7, 5))

        rejected = world.leave.reject(req.request_id, 1, rejection_reason="Projektabschluss")

        assert rejected.status == LeaveStatus.REJECTED
        assert rejected.rejection_reason == "Projektabschluss"
        assert world.balances.get_balance(2, 2026).used_days == Decimal("0")

    def test_approving_sick_leave_leaves_balance_alone(self, world):
        req = world.leave.create_request(2, SICK, date(2026, 6, 1), date(2026, 6, 3))

        world.leave.approve(req.request_id, 1)

        assert world.balances.get_balance(2, 2026).used_days == Decimal("0")

    def test_unknown_request(self, world):
        with pytest.raises(NotFoundError):
            world.leave.approve(4711, 1)


class TestCancel:
    def test_cancel_pending(self, world):
        req = _vacation(world, date(2026, 7, 1), date(2026, 7, 5))

        assert world.leave.cancel_request(req.request_id, 2).status == LeaveStatus.CANCELLED
        # the slot is free again
        _vacation(world, date(2026, 7, 1), date(2026, 7, 5))

    def test_cancel_approved_vacation_releases_days(self, world):
        req = _vacation(world, date(2026, 7, 1), date(2026, 7, 5))
        world.leave.approve(req.request_id, 1)

        world.leave.cancel_request(req.request_id, 2)

        assert world.balances.get_balance(2, 2026).used_days == Decimal("0")

    def test_only_owner_can_cancel(self, world):
        req = _vacation(world, date(2026, 7, 1), date(2026, 7, 5))

        with pytest.raises(ForbiddenError):
            world.leave.cancel_request(req.request_id, 3)

    def test_rejected_request_cannot_be_cancelled(self, world):
        req = _vacation(world, date(2026, 7, 1), date(2026, 7, 5))
        world.leave.reject(req.request_id, 1)

        with pytest.raises(BadRequestError):
            world.leave.cancel_request(req.request_id, 2)


class TestUpdate:
    def test_update_recomputes_days_and_ignores_own_range(self, world):
        req = _vacation(world, date(2026, 7, 1), date(2026, 7, 5))

        updated = world.leave.update_request(req.request_id, 2, end_date=date(2026, 7, 7), notes="laenger")

        assert updated.start_date == date(2026, 7, 1)
        assert updated.end_date == date(2026, 7, 7)
        assert updated.total_days == Decimal("5")
        assert updated.notes == "laenger"

    def test_update_into_other_request_conflicts(self, world):
        req = _vacation(world, date(2026, 7, 1), date(2026, 7, 3))
        _vacation(world, date(2026, 7, 6), date(2026, 7, 10))

        with pytest.raises(ConflictError):
            world.leave.update_request(req.request_id, 2, end_date=date(2026, 7, 6))

    def test_update_by_other_employee(self, world):
        req = _vacation(world, date(2026, 7, 1), date(2026, 7, 5))

        with pytest.raises(ForbiddenError):
            world.leave.update_request(req.request_id, 3, notes="x")

    def test_update_after_decision(self, world):
        req = _vacation(world, date(2026, 7, 1), date(2026, 7, 5))
        world.leave.approve(req.request_id, 1)

        with pytest.raises(BadRequestError):
            world.leave.update_request(req.request_id, 2, end_date=date(2026, 7, 10))


class TestTripsAndSickLeave:
    def test_complete_approved_trip(self, world):
        trip = _trip(world, date(2026, 7, 1), date(2026, 7, 2), estimated_cost="300")
        world.leave.approve(trip.request_id, 1)

        completed = world.leave.complete_trip(trip.request_id, 2, actual_cost=Decimal("280.50"))

        assert completed.status == LeaveStatus.COMPLETED
        assert completed.actual_cost == Decimal("280.50")

    def test_pending_trip_cannot_be_completed(self, world):
        trip = _trip(world, date(2026, 7, 1), date(2026, 7, 2))

        with pytest.raises(BadRequestError):
            world.leave.complete_trip(trip.request_id, 2)

    def test_vacation_cannot_be_completed(self, world):
        req = _vacation(world, date(2026, 7, 1), date(2026, 7, 5))
        world.leave.approve(req.request_id, 1)

        with pytest.raises(BadRequestError):
            world.leave.complete_trip(req.request_id, 2)

    def test_negative_actual_cost(self, world):
        trip = _trip(world, date(2026, 7, 1), date(2026, 7, 2))
        world.leave.approve(trip.request_id, 1)

        with pytest.raises(ValidationError):
            world.leave.complete_trip(trip.request_id, 2, actual_cost=Decimal("-1"))

    def test_submit_certificate(self, world):
        req = world.leave.create_request(2, SICK, date(2026, 6, 1), date(2026, 6, 3))
        world.clock.set(datetime(2026, 6, 4, 9, 30))

        updated = world.leave.submit_certificate(req.request_id, 2)

        assert updated.has_certificate is True
        assert updated.certificate_submitted_at == datetime(2026, 6, 4, 9, 30)

    def test_certificate_only_for_sick_leave(self, world):
        req = _vacation(world, date(2026, 7, 1), date(2026, 7, 5))

        with pytest.raises(BadRequestError):
            world.leave.submit_certificate(req.request_id, 2)

    def test_manager_reports_sick_leave(self, world):
        req = world.leave.report_sick_leave_for(1, 2, date(2026, 5, 28), date(2026, 5, 29), notes="telefonisch")

        assert req.status == LeaveStatus.APPROVED
        assert req.approver_id == 1
        assert req.reported_by == 1
        assert req.total_days == Decimal("2")

    def test_reporting_for_oneself_is_forbidden(self, world):
        with pytest.raises(ForbiddenError):
            world.leave.report_sick_leave_for(2, 2, date(2026, 6, 1), date(2026, 6, 1))

    def test_reported_sick_leave_blocks_overlap(self, world):
        world.leave.report_sick_leave_for(1, 2, date(2026, 6, 1), date(2026, 6, 3))

        with pytest.raises(ConflictError):
            world.leave.create_request(2, SICK, date(2026, 6, 3), date(2026, 6, 4))


class TestQueries:
    def test_list_requests_filters(self, world):
        _vacation(world, date(2026, 7, 1), date(2026, 7, 5))
        _vacation(world, date(2027, 1, 4), date(2027, 1, 8))
        _trip(world, date(2026, 7, 2), date(2026, 7, 3))

        assert len(world.leave.list_requests(2)) == 3
        assert len(world.leave.list_requests(2, year=2026)) == 2
        assert len(world.leave.list_requests(2, category=VACATION, year=2027)) == 1
        assert world.leave.list_requests(2, status=LeaveStatus.APPROVED) == []

    def test_pending_for_manager(self, world):
        a = _vacation(world, date(2026, 7, 1), date(2026, 7, 5))
        b = _vacation(world, date(2026, 7, 6), date(2026, 7, 9), employee_id=3)
        c = _trip(world, date(2026, 8, 3), date(2026, 8, 4))
        world.leave.approve(c.request_id, 1)

        pending = world.leave.list_pending_for_manager(1)

        assert [r.request_id for r in pending] == [a.request_id, b.request_id]
        assert world.leave.list_pending_for_manager(1, category=TRIP) == []

    def test_manager_without_team(self, world):
        assert world.leave.list_pending_for_manager(3) == []


class TestAtomicity:
    @staticmethod
    def _break_updates(world, monkeypatch):
        def failing_update(request):
            raise RuntimeError("leave_requests unavailable")

        monkeypatch.setattr(world.requests_repo, "update", failing_update)

    def test_failed_approval_books_no_days(self, world, monkeypatch):
        req = _vacation(world, date(2026, 7, 1), date(2026, 7, 5))
        self._break_updates(world, monkeypatch)

        with pytest.raises(RuntimeError):
            world.leave.approve(req.request_id, 1)

        assert world.leave.get_request(req.request_id).status == LeaveStatus.PENDING
        assert world.balances.get_balance(2, 2026).used_days == Decimal("0")

    def test_failed_cancel_keeps_booked_days(self, world, monkeypatch):
        req = _vacation(world, date(2026, 7, 1), date(2026, 7, 5))
        world.leave.approve(req.request_id, 1)
        self._break_updates(world, monkeypatch)

        with pytest.raises(RuntimeError):
            world.leave.cancel_request(req.request_id, 2)

        assert world.leave.get_request(req.request_id).status == LeaveStatus.APPROVED
        assert world.balances.get_balance(2, 2026).used_days == Decimal("3")

    def test_approve_racing_cancel(self, world, monkeypatch):
        req = _vacation(world, date(2026, 7, 1), date(2026, 7, 5))
        read = world.requests_repo.get_by_id

        def slow_get(request_id):
            found = read(request_id)
            time.sleep(0.02)
            return found

        monkeypatch.setattr(world.requests_repo, "get_by_id", slow_get)
        refused = []

        def run(call):
            try:
                call()
            except BadRequestError as exc:
                refused.append(exc)

        threads = [
            threading.Thread(target=run, args=(lambda: world.leave.approve(req.request_id, 1),)),
            threading.Thread(target=run, args=(lambda: world.leave.cancel_request(req.request_id, 2),)),
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        # Either order ends cancelled with nothing booked.
        assert len(refused) <= 1
        assert world.requests_repo.rows[req.request_id].status == LeaveStatus.CANCELLED
        assert world.balances.get_balance(2, 2026).used_days == Decimal("0")
