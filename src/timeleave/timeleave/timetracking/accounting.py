from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import day_bounds, minutes_between
from ..compliance.base import ComplianceRuleSet
from ..core.constants import DEFAULT_DAILY_TARGET_MINUTES
from ..core.enums import ClockEventType
from ..employees.repository import EmployeeDirectory
from .model import ClockEvent, DailySummary
from .repository import ClockEventLedger, DailySummaryRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MinuteTally:
    work_minutes: int = 0
    break_minutes: int = 0
    # Breaks long enough to count toward the statutory break requirement.
    qualifying_break_minutes: int = 0


def calculate_minutes(
    events: Sequence[ClockEvent],
    open_end_time: Optional[datetime] = None,
    *,
    min_qualifying_break_minutes: int = 0,
) -> MinuteTally:
    """Pair CLOCK_IN/CLOCK_OUT and BREAK_START/BREAK_END in one pass.

    Work time is the clock-in/clock-out span; breaks are tallied separately and
    are not subtracted from it. An interval still open at the end counts up to
    ``open_end_time`` when one is given, otherwise it contributes nothing.
    """
    work = 0
    breaks = 0
    qualifying = 0
    work_start: Optional[ClockEvent] = None
    break_start: Optional[ClockEvent] = None

    def add_break(start: datetime, end: datetime) -> None:
        nonlocal breaks, qualifying
        minutes = max(0, minutes_between(start, end))
        breaks += minutes
        if minutes >= min_qualifying_break_minutes:
            qualifying += minutes

    for event in sorted(events, key=lambda e: (e.timestamp, e.event_id)):
        if event.event_type == ClockEventType.CLOCK_IN:
            if work_start is not None:
                logger.warning(
                    "Employee %s: CLOCK_IN at %s replaces open CLOCK_IN at %s (event %s)",
                    event.employee_id,
                    event.timestamp,
                    work_start.timestamp,
                    work_start.event_id,
                )
            work_start = event
        elif event.event_type == ClockEventType.CLOCK_OUT:
            if work_start is None:
                logger.warning("Employee %s: CLOCK_OUT at %s without CLOCK_IN ignored", event.employee_id, event.timestamp)
                continue
            work += max(0, minutes_between(work_start.timestamp, event.timestamp))
            work_start = None
        elif event.event_type == ClockEventType.BREAK_START:
            if break_start is not None:
                logger.warning(
                    "Employee %s: BREAK_START at %s replaces open BREAK_START at %s (event %s)",
                    event.employee_id,
                    event.timestamp,
                    break_start.timestamp,
                    break_start.event_id,
                )
            break_start = event
        elif event.event_type == ClockEventType.BREAK_END:
            if break_start is None:
                logger.warning("Employee %s: BREAK_END at %s without BREAK_START ignored", event.employee_id, event.timestamp)
                continue
            add_break(break_start.timestamp, event.timestamp)
            break_start = None

    if open_end_time is not None:
        if work_start is not None:
            work += max(0, minutes_between(work_start.timestamp, open_end_time))
        if break_start is not None:
            add_break(break_start.timestamp, open_end_time)

    return MinuteTally(work_minutes=work, break_minutes=breaks, qualifying_break_minutes=qualifying)


def overtime_minutes(work_minutes: int, daily_target_minutes: int = DEFAULT_DAILY_TARGET_MINUTES) -> int:
    return max(0, int(work_minutes) - int(daily_target_minutes))


class DailyAccountingEngine:
    """Turns one employee-day of clock events into a DailySummary.

    Lưu ý: recalculate() ghi đè toàn bộ trường dẫn xuất, gọi lại bao nhiêu lần
    cũng cho cùng kết quả.
    """

    def __init__(
        self,
        events: ClockEventLedger,
        summaries: DailySummaryRepository,
        employees: EmployeeDirectory,
        rules: ComplianceRuleSet,
    ):
        self._events = events
        self._summaries = summaries
        self._employees = employees
        self._rules = rules

    @property
    def rules(self) -> ComplianceRuleSet:
        return self._rules

    def tally(self, events: Sequence[ClockEvent], open_end_time: Optional[datetime] = None) -> MinuteTally:
        return calculate_minutes(
            events,
            open_end_time,
            min_qualifying_break_minutes=self._rules.min_qualifying_break_minutes,
        )

    def daily_target_minutes(self, employee_id: int) -> int:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            return DEFAULT_DAILY_TARGET_MINUTES
        return employee.daily_target_minutes

    def summarize(self, employee_id: int, work_date: date) -> DailySummary:
        """Compute the day's summary from that day's events only, without persisting it."""
        start, end = day_bounds(work_date)
        events = list(self._events.list_between(employee_id, start, end))
        tally = self.tally(events)

        result = self._rules.check_compliance(tally.work_minutes, tally.qualifying_break_minutes)

        return DailySummary(
            employee_id=employee_id,
            work_date=work_date,
            total_work_minutes=tally.work_minutes,
            total_break_minutes=tally.break_minutes,
            overtime_minutes=overtime_minutes(tally.work_minutes, self.daily_target_minutes(employee_id)),
            is_compliant=result.is_compliant,
            compliance_notes=result.joined_notes,
        )

    def rest_period_note(self, employee_id: int, work_date: date) -> Optional[str]:
        """Rest between the previous shift and the first event of ``work_date``.

        Kept out of the stored summary: the answer changes whenever the day
        before is corrected.
        """
        start, end = day_bounds(work_date)
        events = sorted(self._events.list_between(employee_id, start, end), key=lambda e: (e.timestamp, e.event_id))
        if not events:
            return None
        previous = self._events.latest_before(employee_id, start)
        return self._rules.rest_period_violation(previous.timestamp if previous else None, events[0].timestamp)

    def recalculate(self, employee_id: int, work_date: date) -> DailySummary:
        summary = self._summaries.save(self.summarize(employee_id, work_date))
        if not summary.is_compliant:
            logger.warning(
                "Employee %s on %s is not compliant: %s",
                employee_id,
                work_date.isoformat(),
                summary.compliance_notes,
            )
        return summary
