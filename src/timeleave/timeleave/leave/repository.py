from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import LeaveCategory, LeaveStatus
from .model import LeaveRequest


class LeaveRequestRepository(Protocol):
    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def create(self, request: LeaveRequest) -> LeaveRequest:
        """Persist a new request; the returned copy carries the assigned request_id."""

        raise NotImplementedError

    def update(self, request: LeaveRequest) -> LeaveRequest:
        raise NotImplementedError

    def list_for_employee(
        self,
        employee_id: int,
        *,
        category: Optional[LeaveCategory] = None,
        statuses: Optional[Iterable[LeaveStatus]] = None,
        start_from: Optional[date] = None,
        start_to: Optional[date] = None,
    ) -> Sequence[LeaveRequest]:
        """Requests ordered by start_date; date filters apply to start_date, both inclusive."""

        raise NotImplementedError

    def list_for_employees(
        self,
        employee_ids: Iterable[int],
        *,
        category: Optional[LeaveCategory] = None,
        statuses: Optional[Iterable[LeaveStatus]] = None,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError
