from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, FrozenSet, Optional

from ..core.enums import LeaveCategory, LeaveStatus
from ..core.exceptions import BadRequestError


@dataclass(frozen=True)
class LeaveRequest:
    """Yêu cầu nghỉ (phép năm / ốm / công tác).

    total_days luôn do hệ thống tính, không nhận từ client.
    """

    request_id: int
    employee_id: int
    category: LeaveCategory
    start_date: date
    end_date: date
    total_days: Decimal
    status: LeaveStatus = LeaveStatus.PENDING
    is_half_day_start: bool = False
    is_half_day_end: bool = False
    approver_id: Optional[int] = None
    rejection_reason: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # Sick leave
    reported_by: Optional[int] = None
    has_certificate: bool = False
    certificate_submitted_at: Optional[datetime] = None
    # Business trip
    destination: Optional[str] = None
    purpose: Optional[str] = None
    estimated_cost: Optional[Decimal] = None
    actual_cost: Optional[Decimal] = None
    cost_center: Optional[str] = None

    def overlaps(self, start_date: date, end_date: date) -> bool:
        return self.start_date <= end_date and self.end_date >= start_date


ALLOWED_TRANSITIONS: Dict[LeaveStatus, FrozenSet[LeaveStatus]] = {
    LeaveStatus.PENDING: frozenset({LeaveStatus.APPROVED, LeaveStatus.REJECTED, LeaveStatus.CANCELLED}),
    LeaveStatus.APPROVED: frozenset({LeaveStatus.CANCELLED, LeaveStatus.COMPLETED}),
}


def ensure_status_transition(request: LeaveRequest, target: LeaveStatus) -> None:
    if target == LeaveStatus.COMPLETED and request.category != LeaveCategory.BUSINESS_TRIP:
        raise BadRequestError(f"Only business trips can be completed (request {request.request_id})")
    if target not in ALLOWED_TRANSITIONS.get(request.status, frozenset()):
        raise BadRequestError(
            f"{request.category.value} request {request.request_id} cannot move "
            f"from {request.status.value} to {target.value}"
        )
