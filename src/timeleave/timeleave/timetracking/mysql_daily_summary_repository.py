from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import DailySummary
from .repository import DailySummaryRepository


def _to_summary(r: Dict[str, Any]) -> DailySummary:
    return DailySummary(
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        total_work_minutes=int(r.get("total_work_minutes") or 0),
        total_break_minutes=int(r.get("total_break_minutes") or 0),
        overtime_minutes=int(r.get("overtime_minutes") or 0),
        is_compliant=bool(r.get("is_compliant", 1)),
        compliance_notes=r.get("compliance_notes"),
    )


class MySQLDailySummaryRepository(DailySummaryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, employee_id: int, work_date: date) -> Optional[DailySummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, work_date, total_work_minutes, total_break_minutes,
                       overtime_minutes, is_compliant, compliance_notes
                FROM daily_summaries
                WHERE employee_id=%s AND work_date=%s
                """,
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _to_summary(r) if r else None

    def save(self, summary: DailySummary) -> DailySummary:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO daily_summaries(
                    employee_id, work_date, total_work_minutes, total_break_minutes,
                    overtime_minutes, is_compliant, compliance_notes
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    total_work_minutes=VALUES(total_work_minutes),
                    total_break_minutes=VALUES(total_break_minutes),
                    overtime_minutes=VALUES(overtime_minutes),
                    is_compliant=VALUES(is_compliant),
                    compliance_notes=VALUES(compliance_notes)
                """,
                (
                    int(summary.employee_id),
                    summary.work_date,
                    int(summary.total_work_minutes),
                    int(summary.total_break_minutes),
                    int(summary.overtime_minutes),
                    1 if summary.is_compliant else 0,
                    summary.compliance_notes,
                ),
            )
        return summary

    def list_between(self, employee_id: int, start_date: date, end_date: date) -> Sequence[DailySummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, work_date, total_work_minutes, total_break_minutes,
                       overtime_minutes, is_compliant, compliance_notes
                FROM daily_summaries
                WHERE employee_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date ASC
                """,
                (int(employee_id), start_date, end_date),
            )
            return [_to_summary(r) for r in fetchall(cur)]
