from __future__ import annotations

import dataclasses
import logging
from contextlib import nullcontext
from datetime import date, datetime
from typing import List, Optional, Sequence

from ..common.datetime_utils import Clock, SystemClock, day_bounds, minutes_between, range_bounds
from ..common.validators import require_date_range, require_non_empty
from ..core.enums import ClockEventSource, ClockEventType, TrackingState
from ..core.exceptions import NotFoundError
from ..core.locks import AggregateLocks, TransactionFactory
from ..employees.model import EmployeeProfile
from ..employees.repository import EmployeeDirectory
from .accounting import DailyAccountingEngine
from .model import ClockEvent, DailySummary, StatusSnapshot, TeamMemberStatus, TimeSheet
from .repository import ClockEventLedger, DailySummaryRepository
from .state_machine import derive_state, ensure_transition

logger = logging.getLogger(__name__)


class TimeTrackingService:
    """Clock operations, status, daily summaries and manager corrections."""

    def __init__(
        self,
        events: ClockEventLedger,
        summaries: DailySummaryRepository,
        employees: EmployeeDirectory,
        engine: DailyAccountingEngine,
        *,
        clock: Optional[Clock] = None,
        locks: Optional[AggregateLocks] = None,
        transaction: Optional[TransactionFactory] = None,
    ):
        self._events = events
        self._summaries = summaries
        self._employees = employees
        self._engine = engine
        self._clock = clock or SystemClock()
        self._locks = locks or AggregateLocks()
        self._transaction = transaction or nullcontext

    def _require_employee(self, employee_id: int) -> EmployeeProfile:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError(f"Employee not found: {employee_id}")
        return employee

    def _record(
        self,
        employee_id: int,
        event_type: ClockEventType,
        *,
        source: ClockEventSource,
        notes: Optional[str],
        terminal_id: Optional[str],
    ) -> ClockEvent:
        self._require_employee(employee_id)
        current = derive_state(self._events.latest_for_employee(employee_id))
        new_state = ensure_transition(current, event_type)

        event = self._events.append(
            employee_id=employee_id,
            event_type=event_type,
            timestamp=self._clock.now(),
            source=source,
            terminal_id=terminal_id,
            notes=notes,
        )
        logger.info(
            "Employee %s: %s via %s at %s (%s -> %s)",
            employee_id,
            event_type.value,
            source.value,
            event.timestamp,
            current.value,
            new_state.value,
        )
        return event

    # ---- Clock operations ----
    def clock_in(
        self,
        employee_id: int,
        *,
        source: ClockEventSource = ClockEventSource.WEB,
        notes: Optional[str] = None,
        terminal_id: Optional[str] = None,
    ) -> ClockEvent:
        with self._locks.hold(employee_id):
            return self._record(employee_id, ClockEventType.CLOCK_IN, source=source, notes=notes, terminal_id=terminal_id)

    def clock_out(
        self,
        employee_id: int,
        *,
        source: ClockEventSource = ClockEventSource.WEB,
        notes: Optional[str] = None,
        terminal_id: Optional[str] = None,
    ) -> ClockEvent:
        with self._locks.hold(employee_id), self._transaction():
            event = self._record(employee_id, ClockEventType.CLOCK_OUT, source=source, notes=notes, terminal_id=terminal_id)
            self._engine.recalculate(employee_id, event.timestamp.date())
            return event

    def start_break(
        self,
        employee_id: int,
        *,
        source: ClockEventSource = ClockEventSource.WEB,
        notes: Optional[str] = None,
        terminal_id: Optional[str] = None,
    ) -> ClockEvent:
        with self._locks.hold(employee_id):
            return self._record(employee_id, ClockEventType.BREAK_START, source=source, notes=notes, terminal_id=terminal_id)

    def end_break(
        self,
        employee_id: int,
        *,
        source: ClockEventSource = ClockEventSource.WEB,
        notes: Optional[str] = None,
        terminal_id: Optional[str] = None,
    ) -> ClockEvent:
        with self._locks.hold(employee_id):
            return self._record(employee_id, ClockEventType.BREAK_END, source=source, notes=notes, terminal_id=terminal_id)

    # ---- Status ----
    def get_current_status(self, employee_id: int) -> StatusSnapshot:
        self._require_employee(employee_id)
        now = self._clock.now()
        start, end = day_bounds(now.date())
        today = list(self._events.list_between(employee_id, start, end))
        latest = self._events.latest_for_employee(employee_id)
        state = derive_state(latest)

        tally = self._engine.tally(today, open_end_time=now)

        clocked_in_since: Optional[datetime] = None
        if state != TrackingState.CLOCKED_OUT:
            clock_ins = [e for e in today if e.event_type == ClockEventType.CLOCK_IN]
            if clock_ins:
                clocked_in_since = clock_ins[-1].timestamp

        break_started_at = latest.timestamp if state == TrackingState.ON_BREAK and latest else None

        return StatusSnapshot(
            state=state,
            clocked_in_since=clocked_in_since,
            break_started_at=break_started_at,
            elapsed_work_minutes=(
                max(0, minutes_between(clocked_in_since, now))
                if state == TrackingState.CLOCKED_IN and clocked_in_since
                else 0
            ),
            elapsed_break_minutes=max(0, minutes_between(break_started_at, now)) if break_started_at else 0,
            today_work_minutes=tally.work_minutes,
            today_break_minutes=tally.break_minutes,
        )

    def get_team_current_status(self, manager_id: int) -> List[TeamMemberStatus]:
        self._require_employee(manager_id)
        return [
            TeamMemberStatus(
                employee_id=member.employee_id,
                full_name=member.full_name,
                status=self.get_current_status(member.employee_id),
            )
            for member in self._employees.list_subordinates(manager_id)
        ]

    # ---- Summaries & time sheet ----
    def recalculate_daily_summary(self, employee_id: int, work_date: date) -> DailySummary:
        self._require_employee(employee_id)
        with self._locks.hold(employee_id):
            return self._engine.recalculate(employee_id, work_date)

    def check_rest_period(self, employee_id: int, work_date: date) -> Optional[str]:
        """§5 ArbZG note for the rest before ``work_date``, or None when it was long enough."""
        self._require_employee(employee_id)
        return self._engine.rest_period_note(employee_id, work_date)

    def get_daily_summary(self, employee_id: int, work_date: date) -> DailySummary:
        stored = self._summaries.get(employee_id, work_date)
        if stored:
            return stored
        return self.recalculate_daily_summary(employee_id, work_date)

    def get_time_sheet(self, employee_id: int, start_date: date, end_date: date) -> TimeSheet:
        require_date_range(start_date, end_date)
        self._require_employee(employee_id)
        start, end = range_bounds(start_date, end_date)
        return TimeSheet(
            employee_id=employee_id,
            start_date=start_date,
            end_date=end_date,
            summaries=list(self._summaries.list_between(employee_id, start_date, end_date)),
            entries=list(self._events.list_between(employee_id, start, end)),
        )

    def list_entries(self, employee_id: int, start_date: date, end_date: date) -> Sequence[ClockEvent]:
        require_date_range(start_date, end_date)
        self._require_employee(employee_id)
        start, end = range_bounds(start_date, end_date)
        return self._events.list_between(employee_id, start, end)

    # ---- Manager corrections ----
    def add_manual_entry(
        self,
        manager_id: int,
        employee_id: int,
        event_type: ClockEventType,
        timestamp: datetime,
        *,
        notes: Optional[str] = None,
    ) -> ClockEvent:
        self._require_employee(manager_id)
        self._require_employee(employee_id)
        with self._locks.hold(employee_id), self._transaction():
            event = self._events.append(
                employee_id=employee_id,
                event_type=event_type,
                timestamp=timestamp,
                source=ClockEventSource.MANUAL,
                notes=notes,
                is_modified=True,
                modified_by=manager_id,
            )
            self._engine.recalculate(employee_id, timestamp.date())
        logger.info(
            "Manager %s added %s for employee %s at %s (event %s)",
            manager_id,
            event_type.value,
            employee_id,
            timestamp,
            event.event_id,
        )
        return event

    def _require_event(self, event_id: int) -> ClockEvent:
        event = self._events.get_by_id(event_id)
        if not event:
            raise NotFoundError(f"Time entry not found: {event_id}")
        return event

    def edit_entry(
        self,
        manager_id: int,
        event_id: int,
        *,
        timestamp: Optional[datetime] = None,
        event_type: Optional[ClockEventType] = None,
        notes: Optional[str] = None,
    ) -> ClockEvent:
        self._require_employee(manager_id)
        original = self._require_event(event_id)
        with self._locks.hold(original.employee_id), self._transaction():
            original = self._require_event(event_id)
            updated = dataclasses.replace(
                original,
                timestamp=timestamp if timestamp is not None else original.timestamp,
                event_type=event_type if event_type is not None else original.event_type,
                notes=notes if notes is not None else original.notes,
                is_modified=True,
                modified_by=manager_id,
            )
            updated = self._events.update(updated)

            old_day = original.timestamp.date()
            new_day = updated.timestamp.date()
            self._engine.recalculate(original.employee_id, old_day)
            if new_day != old_day:
                self._engine.recalculate(original.employee_id, new_day)

        logger.info(
            "Manager %s edited event %s of employee %s: %s %s -> %s %s",
            manager_id,
            event_id,
            original.employee_id,
            original.event_type.value,
            original.timestamp,
            updated.event_type.value,
            updated.timestamp,
        )
        return updated

    def delete_entry(self, manager_id: int, event_id: int, reason: str) -> None:
        reason = require_non_empty(reason, "reason")
        self._require_employee(manager_id)
        event = self._require_event(event_id)
        with self._locks.hold(event.employee_id), self._transaction():
            self._events.delete(event_id)
            self._engine.recalculate(event.employee_id, event.timestamp.date())
        logger.info(
            "Manager %s deleted event %s (%s at %s) of employee %s: %s",
            manager_id,
            event_id,
            event.event_type.value,
            event.timestamp,
            event.employee_id,
            reason,
        )
