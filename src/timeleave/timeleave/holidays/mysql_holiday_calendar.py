from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import PublicHoliday
from .repository import HolidayCalendar


class MySQLHolidayCalendar(HolidayCalendar):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_year(self, year: int) -> Sequence[PublicHoliday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT holiday_date, name, state_code, is_recurring
                FROM public_holidays
                WHERE is_recurring=1 OR YEAR(holiday_date)=%s
                ORDER BY holiday_date ASC
                """,
                (int(year),),
            )
            return [
                PublicHoliday(
                    holiday_date=r["holiday_date"],
                    name=r["name"],
                    state_code=r.get("state_code"),
                    is_recurring=bool(r.get("is_recurring")),
                )
                for r in fetchall(cur)
            ]
