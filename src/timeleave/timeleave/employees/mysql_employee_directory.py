from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

from ..core.constants import (
    DEFAULT_DAILY_WORK_HOURS,
    DEFAULT_VACATION_CARRY_OVER_MAX,
    DEFAULT_VACATION_DAYS_PER_YEAR,
    DEFAULT_WEEKLY_WORK_HOURS,
    DEFAULT_WORK_DAYS,
)
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone, parse_work_days
from .model import EmployeeProfile
from .repository import EmployeeDirectory

_SELECT = """
    SELECT e.employee_id, e.full_name, e.manager_id, e.state_code, e.is_active,
           c.daily_work_hours, c.weekly_work_hours, c.work_days,
           c.vacation_days_per_year, c.vacation_carry_over_max
    FROM employees e
    LEFT JOIN employee_configs c ON c.employee_id = e.employee_id
"""


class MySQLEmployeeDirectory(EmployeeDirectory):
    """Employees without a config row fall back to the configured defaults."""

    def __init__(
        self,
        conn_factory: DatabaseConnection,
        *,
        default_daily_hours: Decimal = DEFAULT_DAILY_WORK_HOURS,
        default_weekly_hours: Decimal = DEFAULT_WEEKLY_WORK_HOURS,
        default_work_days: frozenset = DEFAULT_WORK_DAYS,
        default_vacation_days: int = DEFAULT_VACATION_DAYS_PER_YEAR,
        default_carry_over_max: int = DEFAULT_VACATION_CARRY_OVER_MAX,
    ):
        self._conn_factory = conn_factory
        self._default_daily_hours = Decimal(default_daily_hours)
        self._default_weekly_hours = Decimal(default_weekly_hours)
        self._default_work_days = frozenset(default_work_days)
        self._default_vacation_days = int(default_vacation_days)
        self._default_carry_over_max = int(default_carry_over_max)

    def _to_profile(self, r: Dict[str, Any]) -> EmployeeProfile:
        daily = r.get("daily_work_hours")
        weekly = r.get("weekly_work_hours")
        vacation_days = r.get("vacation_days_per_year")
        carry_over_max = r.get("vacation_carry_over_max")
        return EmployeeProfile(
            employee_id=int(r["employee_id"]),
            full_name=r["full_name"],
            manager_id=int(r["manager_id"]) if r.get("manager_id") is not None else None,
            daily_work_hours=as_decimal(daily) if daily is not None else self._default_daily_hours,
            weekly_work_hours=as_decimal(weekly) if weekly is not None else self._default_weekly_hours,
            work_days=parse_work_days(r.get("work_days")) or self._default_work_days,
            vacation_days_per_year=int(vacation_days) if vacation_days is not None else self._default_vacation_days,
            vacation_carry_over_max=int(carry_over_max) if carry_over_max is not None else self._default_carry_over_max,
            state_code=r.get("state_code"),
            is_active=bool(r.get("is_active", 1)),
        )

    def get_by_id(self, employee_id: int) -> Optional[EmployeeProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE e.employee_id=%s", (int(employee_id),))
            r = fetchone(cur)
            return self._to_profile(r) if r else None

    def list_subordinates(self, manager_id: int) -> Sequence[EmployeeProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE e.manager_id=%s AND e.is_active=1 ORDER BY e.employee_id ASC",
                (int(manager_id),),
            )
            return [self._to_profile(r) for r in fetchall(cur)]
