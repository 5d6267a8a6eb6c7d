from __future__ import annotations

from datetime import date
from typing import List, Optional

from ..core.enums import ACTIVE_LEAVE_STATUSES, LeaveCategory
from ..core.exceptions import ConflictError
from .model import LeaveRequest
from .repository import LeaveRequestRepository


class ConflictGuard:
    """Overlap detection within one leave category.

    Requests of different categories may share dates (e.g. a business trip
    during an approved vacation); only PENDING/APPROVED requests block.
    """

    def __init__(self, requests: LeaveRequestRepository):
        self._requests = requests

    def find_overlapping(
        self,
        employee_id: int,
        start_date: date,
        end_date: date,
        category: LeaveCategory,
        exclude_request_id: Optional[int] = None,
    ) -> List[LeaveRequest]:
        active = self._requests.list_for_employee(
            employee_id,
            category=category,
            statuses=ACTIVE_LEAVE_STATUSES,
            start_to=end_date,
        )
        return [
            r
            for r in active
            if r.request_id != exclude_request_id and r.overlaps(start_date, end_date)
        ]

    def ensure_no_overlap(
        self,
        employee_id: int,
        start_date: date,
        end_date: date,
        category: LeaveCategory,
        exclude_request_id: Optional[int] = None,
    ) -> None:
        overlapping = self.find_overlapping(employee_id, start_date, end_date, category, exclude_request_id)
        if overlapping:
            ids = ", ".join(str(r.request_id) for r in overlapping)
            raise ConflictError(
                f"{category.value} request {start_date.isoformat()}..{end_date.isoformat()} "
                f"overlaps existing request(s): {ids}"
            )
