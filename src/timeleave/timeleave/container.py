from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .balances.mysql_balance_repository import MySQLLeaveBalanceRepository
from .balances.service import LeaveBalanceService
from .common.datetime_utils import Clock, SystemClock
from .compliance.statutory_rules import StatutoryComplianceRuleSet
from .core.locks import AggregateLocks
from .database.connection import DBConfig, DatabaseConnection
from .database.mysql_base import parse_work_days
from .employees.mysql_employee_directory import MySQLEmployeeDirectory
from .holidays.mysql_holiday_calendar import MySQLHolidayCalendar
from .holidays.service import HolidayService
from .leave.conflict_guard import ConflictGuard
from .leave.mysql_leave_request_repository import MySQLLeaveRequestRepository
from .leave.service import LeaveService
from .timetracking.accounting import DailyAccountingEngine
from .timetracking.mysql_clock_event_repository import MySQLClockEventLedger
from .timetracking.mysql_daily_summary_repository import MySQLDailySummaryRepository
from .timetracking.service import TimeTrackingService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    employees_repo: MySQLEmployeeDirectory
    holidays_repo: MySQLHolidayCalendar
    events_repo: MySQLClockEventLedger
    summaries_repo: MySQLDailySummaryRepository
    balances_repo: MySQLLeaveBalanceRepository
    requests_repo: MySQLLeaveRequestRepository

    holiday_service: HolidayService
    accounting_engine: DailyAccountingEngine
    time_tracking_service: TimeTrackingService
    balance_service: LeaveBalanceService
    leave_service: LeaveService


def build_container(
    *,
    db_config: dict,
    employee_defaults: Optional[dict] = None,
    compliance_thresholds: Optional[dict] = None,
    clock: Optional[Clock] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    clock = clock or SystemClock()
    locks = AggregateLocks()

    defaults = employee_defaults or {}
    directory_kwargs = {}
    if defaults.get("daily_work_hours") is not None:
        directory_kwargs["default_daily_hours"] = Decimal(str(defaults["daily_work_hours"]))
    if defaults.get("weekly_work_hours") is not None:
        directory_kwargs["default_weekly_hours"] = Decimal(str(defaults["weekly_work_hours"]))
    if parse_work_days(defaults.get("work_days")):
        directory_kwargs["default_work_days"] = parse_work_days(defaults["work_days"])
    if defaults.get("vacation_days_per_year") is not None:
        directory_kwargs["default_vacation_days"] = int(defaults["vacation_days_per_year"])
    if defaults.get("vacation_carry_over_max") is not None:
        directory_kwargs["default_carry_over_max"] = int(defaults["vacation_carry_over_max"])

    employees_repo = MySQLEmployeeDirectory(conn, **directory_kwargs)
    holidays_repo = MySQLHolidayCalendar(conn)
    events_repo = MySQLClockEventLedger(conn)
    summaries_repo = MySQLDailySummaryRepository(conn)
    balances_repo = MySQLLeaveBalanceRepository(conn)
    requests_repo = MySQLLeaveRequestRepository(conn)

    rules = StatutoryComplianceRuleSet(**{k: int(v) for k, v in (compliance_thresholds or {}).items()})
    holiday_service = HolidayService(holidays_repo)
    accounting_engine = DailyAccountingEngine(events_repo, summaries_repo, employees_repo, rules)
    time_tracking_service = TimeTrackingService(
        events_repo,
        summaries_repo,
        employees_repo,
        accounting_engine,
        clock=clock,
        locks=locks,
        transaction=conn.transaction,
    )
    balance_service = LeaveBalanceService(balances_repo, employees_repo, requests_repo, locks=locks)
    leave_service = LeaveService(
        requests_repo,
        balance_service,
        employees_repo,
        holiday_service,
        ConflictGuard(requests_repo),
        clock=clock,
        locks=locks,
        transaction=conn.transaction,
    )

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        holidays_repo=holidays_repo,
        events_repo=events_repo,
        summaries_repo=summaries_repo,
        balances_repo=balances_repo,
        requests_repo=requests_repo,
        holiday_service=holiday_service,
        accounting_engine=accounting_engine,
        time_tracking_service=time_tracking_service,
        balance_service=balance_service,
        leave_service=leave_service,
    )
