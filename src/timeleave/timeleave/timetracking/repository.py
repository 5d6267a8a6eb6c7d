from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ClockEventSource, ClockEventType
from .model import ClockEvent, DailySummary


class ClockEventLedger(Protocol):
    """Append-only, timestamp-ordered clock events per employee.

    Only the administrative correction paths call ``update`` and ``delete``.
    """

    def latest_for_employee(self, employee_id: int) -> Optional[ClockEvent]:
        raise NotImplementedError

    def latest_before(self, employee_id: int, before: datetime) -> Optional[ClockEvent]:
        raise NotImplementedError

    def list_between(self, employee_id: int, start: datetime, end: datetime) -> Sequence[ClockEvent]:
        """Events with start <= timestamp < end, ascending by timestamp."""

        raise NotImplementedError

    def get_by_id(self, event_id: int) -> Optional[ClockEvent]:
        raise NotImplementedError

    def append(
        self,
        *,
        employee_id: int,
        event_type: ClockEventType,
        timestamp: datetime,
        source: ClockEventSource,
        terminal_id: Optional[str] = None,
        notes: Optional[str] = None,
        is_modified: bool = False,
        modified_by: Optional[int] = None,
    ) -> ClockEvent:
        raise NotImplementedError

    def update(self, event: ClockEvent) -> ClockEvent:
        raise NotImplementedError

    def delete(self, event_id: int) -> bool:
        raise NotImplementedError


class DailySummaryRepository(Protocol):
    def get(self, employee_id: int, work_date: date) -> Optional[DailySummary]:
        raise NotImplementedError

    def save(self, summary: DailySummary) -> DailySummary:
        """Insert or overwrite the row for (employee_id, work_date)."""

        raise NotImplementedError

    def list_between(self, employee_id: int, start_date: date, end_date: date) -> Sequence[DailySummary]:
        raise NotImplementedError
