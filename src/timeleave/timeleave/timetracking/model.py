from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

from ..core.enums import ClockEventSource, ClockEventType, TrackingState


@dataclass(frozen=True)
class ClockEvent:
    """Thực thể miền (domain): một sự kiện trong sổ chấm công (ledger)."""

    event_id: int
    employee_id: int
    event_type: ClockEventType
    timestamp: datetime
    source: ClockEventSource
    terminal_id: Optional[str] = None
    notes: Optional[str] = None
    is_modified: bool = False
    modified_by: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class DailySummary:
    """Derived cache: always reproducible from the day's clock events."""

    employee_id: int
    work_date: date
    total_work_minutes: int = 0
    total_break_minutes: int = 0
    overtime_minutes: int = 0
    is_compliant: bool = True
    compliance_notes: Optional[str] = None


@dataclass(frozen=True)
class StatusSnapshot:
    state: TrackingState
    clocked_in_since: Optional[datetime]
    break_started_at: Optional[datetime]
    elapsed_work_minutes: int
    elapsed_break_minutes: int
    today_work_minutes: int
    today_break_minutes: int


@dataclass(frozen=True)
class TimeSheet:
    employee_id: int
    start_date: date
    end_date: date
    summaries: List[DailySummary] = field(default_factory=list)
    entries: List[ClockEvent] = field(default_factory=list)

    @property
    def total_work_minutes(self) -> int:
        return sum(s.total_work_minutes for s in self.summaries)

    @property
    def total_break_minutes(self) -> int:
        return sum(s.total_break_minutes for s in self.summaries)

    @property
    def total_overtime_minutes(self) -> int:
        return sum(s.overtime_minutes for s in self.summaries)


@dataclass(frozen=True)
class TeamMemberStatus:
    employee_id: int
    full_name: str
    status: StatusSnapshot
