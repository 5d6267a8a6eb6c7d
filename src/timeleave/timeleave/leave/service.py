from __future__ import annotations

import dataclasses
import logging
from contextlib import nullcontext
from datetime import date
from decimal import Decimal
from typing import Any, Dict, FrozenSet, List, Optional, Sequence

from ..balances.service import LeaveBalanceService
from ..balances.working_days import calculate_working_days
from ..common.datetime_utils import Clock, SystemClock
from ..common.validators import require_date_range, require_non_empty
from ..core.enums import LeaveCategory, LeaveStatus
from ..core.exceptions import BadRequestError, ForbiddenError, NotFoundError, ValidationError
from ..core.locks import AggregateLocks, TransactionFactory
from ..employees.model import EmployeeProfile
from ..employees.repository import EmployeeDirectory
from ..holidays.service import HolidayService
from .conflict_guard import ConflictGuard
from .model import LeaveRequest, ensure_status_transition
from .repository import LeaveRequestRepository

logger = logging.getLogger(__name__)

# Category-specific fields accepted on create/update.
DETAIL_FIELDS: Dict[LeaveCategory, FrozenSet[str]] = {
    LeaveCategory.VACATION: frozenset(),
    LeaveCategory.SICK: frozenset(),
    LeaveCategory.BUSINESS_TRIP: frozenset({"destination", "purpose", "estimated_cost", "cost_center"}),
}


class LeaveService:
    """Vòng đời yêu cầu nghỉ cho cả ba loại: phép năm, nghỉ ốm, công tác.

    Mọi kiểm tra (quyền sở hữu, trạng thái, trùng lịch, số dư) chạy xong
    trước lần ghi đầu tiên; lỗi thì không có gì được lưu.
    """

    def __init__(
        self,
        requests: LeaveRequestRepository,
        balances: LeaveBalanceService,
        employees: EmployeeDirectory,
        holidays: HolidayService,
        guard: ConflictGuard,
        *,
        clock: Optional[Clock] = None,
        locks: Optional[AggregateLocks] = None,
        transaction: Optional[TransactionFactory] = None,
    ):
        self._requests = requests
        self._balances = balances
        self._employees = employees
        self._holidays = holidays
        self._guard = guard
        self._clock = clock or SystemClock()
        self._locks = locks or AggregateLocks()
        self._transaction = transaction or nullcontext

    # ---- helpers ----
    def _require_employee(self, employee_id: int) -> EmployeeProfile:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError(f"Employee not found: {employee_id}")
        return employee

    def _require_request(self, request_id: int) -> LeaveRequest:
        request = self._requests.get_by_id(request_id)
        if not request:
            raise NotFoundError(f"Leave request not found: {request_id}")
        return request

    @staticmethod
    def _require_owner(request: LeaveRequest, employee_id: int) -> None:
        if request.employee_id != employee_id:
            raise ForbiddenError(f"Employee {employee_id} does not own leave request {request.request_id}")

    @staticmethod
    def _clean_details(category: LeaveCategory, details: Dict[str, Any]) -> Dict[str, Any]:
        unknown = set(details) - DETAIL_FIELDS[category]
        if unknown:
            raise ValidationError(f"Unsupported fields for {category.value}: {', '.join(sorted(unknown))}")
        cleaned = dict(details)
        if cleaned.get("estimated_cost") is not None:
            cleaned["estimated_cost"] = Decimal(cleaned["estimated_cost"])
            if cleaned["estimated_cost"] < 0:
                raise ValidationError("estimated_cost must be >= 0")
        return cleaned

    def _count_days(
        self,
        employee: EmployeeProfile,
        start_date: date,
        end_date: date,
        half_day_start: bool,
        half_day_end: bool,
    ) -> Decimal:
        holidays = self._holidays.dates_between(start_date, end_date, employee.state_code)
        return calculate_working_days(
            start_date,
            end_date,
            half_day_start,
            half_day_end,
            employee.work_days,
            holidays,
        )

    def _validate_period(
        self,
        employee: EmployeeProfile,
        category: LeaveCategory,
        start_date: date,
        end_date: date,
        half_day_start: bool,
        half_day_end: bool,
        exclude_request_id: Optional[int] = None,
    ) -> Decimal:
        """Run every date/overlap/balance check and return the computed total_days."""
        require_date_range(start_date, end_date)
        if category == LeaveCategory.VACATION and start_date < self._clock.now().date():
            raise ValidationError(f"Vacation cannot start in the past ({start_date.isoformat()})")

        self._guard.ensure_no_overlap(employee.employee_id, start_date, end_date, category, exclude_request_id)

        total_days = self._count_days(employee, start_date, end_date, half_day_start, half_day_end)
        if category == LeaveCategory.VACATION:
            if total_days <= 0:
                raise ValidationError(
                    f"Vacation {start_date.isoformat()}..{end_date.isoformat()} contains no working days"
                )
            balance = self._balances.get_or_create_balance(employee.employee_id, start_date.year)
            if total_days > balance.remaining_days:
                raise BadRequestError(
                    f"Insufficient vacation balance: requested {total_days}, remaining {balance.remaining_days}"
                )
        return total_days

    # ---- lifecycle ----
    def create_request(
        self,
        employee_id: int,
        category: LeaveCategory,
        start_date: date,
        end_date: date,
        *,
        half_day_start: bool = False,
        half_day_end: bool = False,
        notes: Optional[str] = None,
        **details: Any,
    ) -> LeaveRequest:
        category = LeaveCategory(category)
        details = self._clean_details(category, details)
        if category == LeaveCategory.BUSINESS_TRIP:
            details["destination"] = require_non_empty(details.get("destination") or "", "destination")

        employee = self._require_employee(employee_id)
        with self._locks.hold(employee_id), self._transaction():
            total_days = self._validate_period(employee, category, start_date, end_date, half_day_start, half_day_end)
            now = self._clock.now()
            created = self._requests.create(
                LeaveRequest(
                    request_id=0,
                    employee_id=employee_id,
                    category=category,
                    start_date=start_date,
                    end_date=end_date,
                    total_days=total_days,
                    status=LeaveStatus.PENDING,
                    is_half_day_start=half_day_start,
                    is_half_day_end=half_day_end,
                    notes=notes,
                    created_at=now,
                    updated_at=now,
                    **details,
                )
            )
        logger.info(
            "Employee %s requested %s %s..%s (%s days), request %s",
            employee_id,
            category.value,
            start_date.isoformat(),
            end_date.isoformat(),
            total_days,
            created.request_id,
        )
        return created

    def update_request(
        self,
        request_id: int,
        employee_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        half_day_start: Optional[bool] = None,
        half_day_end: Optional[bool] = None,
        notes: Optional[str] = None,
        **details: Any,
    ) -> LeaveRequest:
        employee = self._require_employee(employee_id)
        with self._locks.hold(employee_id):
            request = self._require_request(request_id)
            self._require_owner(request, employee_id)
            if request.status != LeaveStatus.PENDING:
                raise BadRequestError(f"Only PENDING requests can be edited (request {request_id} is {request.status.value})")
            details = self._clean_details(request.category, details)

            new_start = start_date or request.start_date
            new_end = end_date or request.end_date
            new_half_start = request.is_half_day_start if half_day_start is None else half_day_start
            new_half_end = request.is_half_day_end if half_day_end is None else half_day_end

            total_days = self._validate_period(
                employee,
                request.category,
                new_start,
                new_end,
                new_half_start,
                new_half_end,
                exclude_request_id=request_id,
            )
            updated = self._requests.update(
                dataclasses.replace(
                    request,
                    start_date=new_start,
                    end_date=new_end,
                    is_half_day_start=new_half_start,
                    is_half_day_end=new_half_end,
                    total_days=total_days,
                    notes=notes if notes is not None else request.notes,
                    updated_at=self._clock.now(),
                    **{k: v for k, v in details.items() if v is not None},
                )
            )
        logger.info("Employee %s updated request %s (%s days)", employee_id, request_id, total_days)
        return updated

    def cancel_request(self, request_id: int, employee_id: int) -> LeaveRequest:
        with self._locks.hold(employee_id):
            request = self._require_request(request_id)
            self._require_owner(request, employee_id)
            ensure_status_transition(request, LeaveStatus.CANCELLED)

            with self._transaction():
                if request.status == LeaveStatus.APPROVED and request.category == LeaveCategory.VACATION:
                    self._balances.release_approval(employee_id, request.start_date.year, request.total_days)
                cancelled = self._requests.update(
                    dataclasses.replace(request, status=LeaveStatus.CANCELLED, updated_at=self._clock.now())
                )
        logger.info(
            "Employee %s cancelled %s request %s (was %s)",
            employee_id,
            request.category.value,
            request_id,
            request.status.value,
        )
        return cancelled

    def _decide(self, request_id: int, approver_id: int, target: LeaveStatus) -> LeaveRequest:
        self._require_employee(approver_id)
        request = self._require_request(request_id)
        if request.employee_id == approver_id:
            raise ForbiddenError(f"Employee {approver_id} cannot decide on their own request {request_id}")
        if request.status != LeaveStatus.PENDING:
            raise BadRequestError(f"Request {request_id} is not PENDING ({request.status.value})")
        ensure_status_transition(request, target)
        return request

    def approve(self, request_id: int, approver_id: int) -> LeaveRequest:
        owner_id = self._require_request(request_id).employee_id
        with self._locks.hold(owner_id):
            request = self._decide(request_id, approver_id, LeaveStatus.APPROVED)

            # Balance and status change commit together or not at all.
            with self._transaction():
                if request.category == LeaveCategory.VACATION:
                    year = request.start_date.year
                    balance = self._balances.get_or_create_balance(owner_id, year)
                    if request.total_days > balance.remaining_days:
                        raise BadRequestError(
                            f"Insufficient vacation balance: request {request_id} needs {request.total_days}, "
                            f"remaining {balance.remaining_days}"
                        )
                    self._balances.apply_approval(owner_id, year, request.total_days)

                approved = self._requests.update(
                    dataclasses.replace(
                        request,
                        status=LeaveStatus.APPROVED,
                        approver_id=approver_id,
                        updated_at=self._clock.now(),
                    )
                )
        logger.info("Employee %s approved %s request %s", approver_id, request.category.value, request_id)
        return approved

    def reject(self, request_id: int, approver_id: int, rejection_reason: Optional[str] = None) -> LeaveRequest:
        owner_id = self._require_request(request_id).employee_id
        with self._locks.hold(owner_id):
            request = self._decide(request_id, approver_id, LeaveStatus.REJECTED)
            rejected = self._requests.update(
                dataclasses.replace(
                    request,
                    status=LeaveStatus.REJECTED,
                    approver_id=approver_id,
                    rejection_reason=rejection_reason,
                    updated_at=self._clock.now(),
                )
            )
        logger.info(
            "Employee %s rejected %s request %s: %s",
            approver_id,
            request.category.value,
            request_id,
            rejection_reason or "-",
        )
        return rejected

    def complete_trip(self, request_id: int, employee_id: int, actual_cost: Optional[Decimal] = None) -> LeaveRequest:
        with self._locks.hold(employee_id):
            request = self._require_request(request_id)
            self._require_owner(request, employee_id)
            if request.status != LeaveStatus.APPROVED:
                raise BadRequestError(f"Only APPROVED trips can be completed (request {request_id} is {request.status.value})")
            ensure_status_transition(request, LeaveStatus.COMPLETED)
            if actual_cost is not None and Decimal(actual_cost) < 0:
                raise ValidationError("actual_cost must be >= 0")

            completed = self._requests.update(
                dataclasses.replace(
                    request,
                    status=LeaveStatus.COMPLETED,
                    actual_cost=Decimal(actual_cost) if actual_cost is not None else request.actual_cost,
                    updated_at=self._clock.now(),
                )
            )
        logger.info("Employee %s completed business trip %s", employee_id, request_id)
        return completed

    def submit_certificate(self, request_id: int, employee_id: int) -> LeaveRequest:
        with self._locks.hold(employee_id):
            request = self._require_request(request_id)
            self._require_owner(request, employee_id)
            if request.category != LeaveCategory.SICK:
                raise BadRequestError(f"Certificates apply to sick leave only (request {request_id})")
            if request.status.is_terminal:
                raise BadRequestError(f"Request {request_id} is {request.status.value}")

            now = self._clock.now()
            updated = self._requests.update(
                dataclasses.replace(request, has_certificate=True, certificate_submitted_at=now, updated_at=now)
            )
        logger.info("Employee %s submitted a sick-leave certificate for request %s", employee_id, request_id)
        return updated

    def report_sick_leave_for(
        self,
        manager_id: int,
        employee_id: int,
        start_date: date,
        end_date: date,
        *,
        notes: Optional[str] = None,
    ) -> LeaveRequest:
        """Sick leave entered by a manager; it needs no further approval."""
        self._require_employee(manager_id)
        employee = self._require_employee(employee_id)
        if manager_id == employee_id:
            raise ForbiddenError("Use create_request to report your own sick leave")

        with self._locks.hold(employee_id):
            total_days = self._validate_period(employee, LeaveCategory.SICK, start_date, end_date, False, False)
            now = self._clock.now()
            created = self._requests.create(
                LeaveRequest(
                    request_id=0,
                    employee_id=employee_id,
                    category=LeaveCategory.SICK,
                    start_date=start_date,
                    end_date=end_date,
                    total_days=total_days,
                    status=LeaveStatus.APPROVED,
                    approver_id=manager_id,
                    reported_by=manager_id,
                    notes=notes,
                    created_at=now,
                    updated_at=now,
                )
            )
        logger.info(
            "Manager %s reported sick leave %s..%s for employee %s, request %s",
            manager_id,
            start_date.isoformat(),
            end_date.isoformat(),
            employee_id,
            created.request_id,
        )
        return created

    # ---- queries ----
    def get_request(self, request_id: int) -> LeaveRequest:
        return self._require_request(request_id)

    def list_requests(
        self,
        employee_id: int,
        *,
        category: Optional[LeaveCategory] = None,
        year: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
    ) -> Sequence[LeaveRequest]:
        self._require_employee(employee_id)
        return self._requests.list_for_employee(
            employee_id,
            category=category,
            statuses=[status] if status is not None else None,
            start_from=date(year, 1, 1) if year is not None else None,
            start_to=date(year, 12, 31) if year is not None else None,
        )

    def list_pending_for_manager(self, manager_id: int, *, category: Optional[LeaveCategory] = None) -> List[LeaveRequest]:
        self._require_employee(manager_id)
        team_ids = [e.employee_id for e in self._employees.list_subordinates(manager_id)]
        if not team_ids:
            return []
        return list(
            self._requests.list_for_employees(team_ids, category=category, statuses=[LeaveStatus.PENDING])
        )
