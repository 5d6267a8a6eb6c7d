from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchone
from .model import LeaveBalance
from .repository import LeaveBalanceRepository


class MySQLLeaveBalanceRepository(LeaveBalanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, employee_id: int, year: int) -> Optional[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, year, total_days, used_days, carried_over_days
                FROM leave_balances
                WHERE employee_id=%s AND year=%s
                """,
                (int(employee_id), int(year)),
            )
            r = fetchone(cur)
            if not r:
                return None
            return LeaveBalance(
                employee_id=int(r["employee_id"]),
                year=int(r["year"]),
                total_days=as_decimal(r["total_days"]),
                used_days=as_decimal(r.get("used_days")),
                carried_over_days=as_decimal(r.get("carried_over_days")),
            )

    def save(self, balance: LeaveBalance) -> LeaveBalance:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_balances(employee_id, year, total_days, used_days, carried_over_days)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    total_days=VALUES(total_days),
                    used_days=VALUES(used_days),
                    carried_over_days=VALUES(carried_over_days)
                """,
                (
                    int(balance.employee_id),
                    int(balance.year),
                    balance.total_days,
                    balance.used_days,
                    balance.carried_over_days,
                ),
            )
        return balance
