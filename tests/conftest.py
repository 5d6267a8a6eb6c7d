from __future__ import annotations

import copy
import dataclasses
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional

import pytest

from src.timeleave.timeleave.balances.model import LeaveBalance
from src.timeleave.timeleave.balances.service import LeaveBalanceService
from src.timeleave.timeleave.compliance.statutory_rules import StatutoryComplianceRuleSet
from src.timeleave.timeleave.core.locks import AggregateLocks
from src.timeleave.timeleave.employees.model import EmployeeProfile
from src.timeleave.timeleave.holidays.model import PublicHoliday
from src.timeleave.timeleave.holidays.service import HolidayService
from src.timeleave.timeleave.leave.conflict_guard import ConflictGuard
from src.timeleave.timeleave.leave.model import LeaveRequest
from src.timeleave.timeleave.leave.service import LeaveService
from src.timeleave.timeleave.timetracking.accounting import DailyAccountingEngine
from src.timeleave.timeleave.timetracking.model import ClockEvent, DailySummary
from src.timeleave.timeleave.timetracking.service import TimeTrackingService

MANAGER_ID = 1
EMPLOYEE_ID = 2
OTHER_EMPLOYEE_ID = 3


class FrozenClock:
    def __init__(self, now: datetime):
        self._now = now

    def now(self) -> datetime:
        return self._now

    def set(self, now: datetime) -> None:
        self._now = now

    def advance(self, **kwargs) -> datetime:
        self._now = self._now + timedelta(**kwargs)
        return self._now


@dataclass
class InMemoryEmployees:
    by_id: dict[int, EmployeeProfile]

    def get_by_id(self, employee_id: int) -> Optional[EmployeeProfile]:
        return self.by_id.get(employee_id)

    def list_subordinates(self, manager_id: int):
        return [e for e in self.by_id.values() if e.manager_id == manager_id and e.is_active]


@dataclass
class InMemoryHolidays:
    holidays: list[PublicHoliday]

    def list_for_year(self, year: int):
        return [h for h in self.holidays if h.is_recurring or h.holiday_date.year == year]


class InMemoryLedger:
    def __init__(self):
        self._events: dict[int, ClockEvent] = {}
        self._next_id = 1

    def _for(self, employee_id: int):
        items = [e for e in self._events.values() if e.employee_id == employee_id]
        items.sort(key=lambda e: (e.timestamp, e.event_id))
        return items

    def latest_for_employee(self, employee_id: int):
        items = self._for(employee_id)
        return items[-1] if items else None

    def latest_before(self, employee_id: int, before: datetime):
        items = [e for e in self._for(employee_id) if e.timestamp < before]
        return items[-1] if items else None

    def list_between(self, employee_id: int, start: datetime, end: datetime):
        return [e for e in self._for(employee_id) if start <= e.timestamp < end]

    def get_by_id(self, event_id: int):
        return self._events.get(event_id)

    def append(self, *, employee_id, event_type, timestamp, source, terminal_id=None, notes=None, is_modified=False, modified_by=None):
        event = ClockEvent(
            event_id=self._next_id,
            employee_id=employee_id,
            event_type=event_type,
            timestamp=timestamp,
            source=source,
            terminal_id=terminal_id,
            notes=notes,
            is_modified=is_modified,
            modified_by=modified_by,
            created_at=timestamp,
        )
        self._events[event.event_id] = event
        self._next_id += 1
        return event

    def update(self, event: ClockEvent):
        self._events[event.event_id] = event
        return event

    def delete(self, event_id: int) -> bool:
        return self._events.pop(event_id, None) is not None

    def all(self):
        return sorted(self._events.values(), key=lambda e: e.event_id)


class InMemorySummaries:
    def __init__(self):
        self.rows: dict[tuple[int, date], DailySummary] = {}
        self.saves = 0

    def get(self, employee_id: int, work_date: date):
        return self.rows.get((employee_id, work_date))

    def save(self, summary: DailySummary):
        self.rows[(summary.employee_id, summary.work_date)] = summary
        self.saves += 1
        return summary

    def list_between(self, employee_id: int, start_date: date, end_date: date):
        return sorted(
            (s for (eid, d), s in self.rows.items() if eid == employee_id and start_date <= d <= end_date),
            key=lambda s: s.work_date,
        )


class InMemoryBalances:
    def __init__(self):
        self.rows: dict[tuple[int, int], LeaveBalance] = {}

    def get(self, employee_id: int, year: int):
        return self.rows.get((employee_id, year))

    def save(self, balance: LeaveBalance):
        self.rows[(balance.employee_id, balance.year)] = balance
        return balance


class InMemoryLeaveRequests:
    def __init__(self):
        self.rows: dict[int, LeaveRequest] = {}
        self._next_id = 1

    def get_by_id(self, request_id: int):
        return self.rows.get(request_id)

    def create(self, request: LeaveRequest):
        created = dataclasses.replace(request, request_id=self._next_id)
        self.rows[created.request_id] = created
        self._next_id += 1
        return created

    def update(self, request: LeaveRequest):
        self.rows[request.request_id] = request
        return request

    def _match(self, r, category, statuses):
        if category is not None and r.category != category:
            return False
        if statuses is not None and r.status not in set(statuses):
            return False
        return True

    def list_for_employee(self, employee_id, *, category=None, statuses=None, start_from=None, start_to=None):
        items = [
            r
            for r in self.rows.values()
            if r.employee_id == employee_id
            and self._match(r, category, statuses)
            and (start_from is None or r.start_date >= start_from)
            and (start_to is None or r.start_date <= start_to)
        ]
        return sorted(items, key=lambda r: (r.start_date, r.request_id))

    def list_for_employees(self, employee_ids, *, category=None, statuses=None):
        ids = set(employee_ids)
        items = [r for r in self.rows.values() if r.employee_id in ids and self._match(r, category, statuses)]
        return sorted(items, key=lambda r: (r.start_date, r.request_id))


class InMemoryTransaction:
    """Snapshots the stores on entry and restores them if the block raises."""

    def __init__(self, *stores):
        self._stores = stores
        self.rollbacks = 0

    @contextmanager
    def __call__(self):
        snapshots = [copy.deepcopy(vars(store)) for store in self._stores]
        try:
            yield
        except Exception:
            for store, snapshot in zip(self._stores, snapshots):
                vars(store).clear()
                vars(store).update(snapshot)
            self.rollbacks += 1
            raise


@dataclass
class World:
    clock: FrozenClock
    employees: InMemoryEmployees
    holidays: InMemoryHolidays
    ledger: InMemoryLedger
    summaries: InMemorySummaries
    balances_repo: InMemoryBalances
    requests_repo: InMemoryLeaveRequests
    transaction: InMemoryTransaction
    engine: DailyAccountingEngine
    time_tracking: TimeTrackingService
    balances: LeaveBalanceService
    leave: LeaveService


def make_employees() -> InMemoryEmployees:
    return InMemoryEmployees(
        by_id={
            MANAGER_ID: EmployeeProfile(employee_id=MANAGER_ID, full_name="Anna Schmidt", state_code="BY"),
            EMPLOYEE_ID: EmployeeProfile(employee_id=EMPLOYEE_ID, full_name="Lukas Weber", manager_id=MANAGER_ID, state_code="BY"),
            OTHER_EMPLOYEE_ID: EmployeeProfile(
                employee_id=OTHER_EMPLOYEE_ID,
                full_name="Mia Fischer",
                manager_id=MANAGER_ID,
                daily_work_hours=Decimal("6.00"),
                work_days=frozenset({1, 2, 3, 4}),
                vacation_days_per_year=24,
                vacation_carry_over_max=5,
                state_code="NW",
            ),
        }
    )


@pytest.fixture
def clock() -> FrozenClock:
    # Monday
    return FrozenClock(datetime(2026, 6, 1, 8, 0))


@pytest.fixture
def world(clock) -> World:
    employees = make_employees()
    holidays = InMemoryHolidays(
        holidays=[
            PublicHoliday(holiday_date=date(2026, 1, 1), name="Neujahr"),
            PublicHoliday(holiday_date=date(2026, 1, 6), name="Heilige Drei Koenige", state_code="BY"),
            PublicHoliday(holiday_date=date(2026, 12, 25), name="1. Weihnachtstag"),
            PublicHoliday(holiday_date=date(2026, 12, 26), name="2. Weihnachtstag"),
        ]
    )
    ledger = InMemoryLedger()
    summaries = InMemorySummaries()
    balances_repo = InMemoryBalances()
    requests_repo = InMemoryLeaveRequests()
    locks = AggregateLocks()
    transaction = InMemoryTransaction(ledger, summaries, balances_repo, requests_repo)

    engine = DailyAccountingEngine(ledger, summaries, employees, StatutoryComplianceRuleSet())
    time_tracking = TimeTrackingService(ledger, summaries, employees, engine, clock=clock, locks=locks, transaction=transaction)
    balances = LeaveBalanceService(balances_repo, employees, requests_repo, locks=locks)
    leave = LeaveService(
        requests_repo,
        balances,
        employees,
        HolidayService(holidays),
        ConflictGuard(requests_repo),
        clock=clock,
        locks=locks,
        transaction=transaction,
    )
    return World(
        clock=clock,
        employees=employees,
        holidays=holidays,
        ledger=ledger,
        summaries=summaries,
        balances_repo=balances_repo,
        requests_repo=requests_repo,
        transaction=transaction,
        engine=engine,
        time_tracking=time_tracking,
        balances=balances,
        leave=leave,
    )
