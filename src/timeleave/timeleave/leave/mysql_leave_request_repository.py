from __future__ import annotations

import dataclasses
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..core.enums import LeaveCategory, LeaveStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone, in_clause
from .model import LeaveRequest
from .repository import LeaveRequestRepository

_COLUMNS = """
    request_id, employee_id, category, start_date, end_date, is_half_day_start,
    is_half_day_end, total_days, status, approver_id, rejection_reason, notes,
    reported_by, has_certificate, certificate_submitted_at,
    destination, purpose, estimated_cost, actual_cost, cost_center,
    created_at, updated_at
"""


def _optional_decimal(value: Any):
    return as_decimal(value) if value is not None else None


def _optional_int(value: Any) -> Optional[int]:
    return int(value) if value is not None else None


def _to_request(r: Dict[str, Any]) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        category=LeaveCategory(r["category"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        total_days=as_decimal(r["total_days"]),
        status=LeaveStatus(r["status"]),
        is_half_day_start=bool(r.get("is_half_day_start")),
        is_half_day_end=bool(r.get("is_half_day_end")),
        approver_id=_optional_int(r.get("approver_id")),
        rejection_reason=r.get("rejection_reason"),
        notes=r.get("notes"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        reported_by=_optional_int(r.get("reported_by")),
        has_certificate=bool(r.get("has_certificate")),
        certificate_submitted_at=r.get("certificate_submitted_at"),
        destination=r.get("destination"),
        purpose=r.get("purpose"),
        estimated_cost=_optional_decimal(r.get("estimated_cost")),
        actual_cost=_optional_decimal(r.get("actual_cost")),
        cost_center=r.get("cost_center"),
    )


def _row_values(req: LeaveRequest) -> tuple:
    return (
        int(req.employee_id),
        req.category.value,
        req.start_date,
        req.end_date,
        1 if req.is_half_day_start else 0,
        1 if req.is_half_day_end else 0,
        req.total_days,
        req.status.value,
        req.approver_id,
        req.rejection_reason,
        req.notes,
        req.reported_by,
        1 if req.has_certificate else 0,
        req.certificate_submitted_at,
        req.destination,
        req.purpose,
        req.estimated_cost,
        req.actual_cost,
        req.cost_center,
        req.created_at,
        req.updated_at,
    )


class MySQLLeaveRequestRepository(LeaveRequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _to_request(r) if r else None

    def create(self, request: LeaveRequest) -> LeaveRequest:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(
                    employee_id, category, start_date, end_date, is_half_day_start,
                    is_half_day_end, total_days, status, approver_id, rejection_reason, notes,
                    reported_by, has_certificate, certificate_submitted_at,
                    destination, purpose, estimated_cost, actual_cost, cost_center,
                    created_at, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                _row_values(request),
            )
            return dataclasses.replace(request, request_id=int(cur.lastrowid))

    def update(self, request: LeaveRequest) -> LeaveRequest:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET employee_id=%s, category=%s, start_date=%s, end_date=%s, is_half_day_start=%s,
                    is_half_day_end=%s, total_days=%s, status=%s, approver_id=%s, rejection_reason=%s,
                    notes=%s, reported_by=%s, has_certificate=%s, certificate_submitted_at=%s,
                    destination=%s, purpose=%s, estimated_cost=%s, actual_cost=%s, cost_center=%s,
                    created_at=%s, updated_at=%s
                WHERE request_id=%s
                """,
                _row_values(request) + (int(request.request_id),),
            )
        return request

    def _list(self, clauses: List[str], params: List[object]) -> Sequence[LeaveRequest]:
        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE {where}
                ORDER BY start_date ASC, request_id ASC
                """,
                tuple(params),
            )
            return [_to_request(r) for r in fetchall(cur)]

    @staticmethod
    def _filters(
        clauses: List[str],
        params: List[object],
        category: Optional[LeaveCategory],
        statuses: Optional[Iterable[LeaveStatus]],
    ) -> None:
        if category is not None:
            clauses.append("category=%s")
            params.append(category.value)
        if statuses is not None:
            placeholders, items = in_clause(s.value for s in statuses)
            if not items:
                clauses.append("1=0")
            else:
                clauses.append(f"status IN ({placeholders})")
                params.extend(items)

    def list_for_employee(
        self,
        employee_id: int,
        *,
        category: Optional[LeaveCategory] = None,
        statuses: Optional[Iterable[LeaveStatus]] = None,
        start_from: Optional[date] = None,
        start_to: Optional[date] = None,
    ) -> Sequence[LeaveRequest]:
        clauses = ["employee_id=%s"]
        params: List[object] = [int(employee_id)]
        self._filters(clauses, params, category, statuses)
        if start_from is not None:
            clauses.append("start_date >= %s")
            params.append(start_from)
        if start_to is not None:
            clauses.append("start_date <= %s")
            params.append(start_to)
        return self._list(clauses, params)

    def list_for_employees(
        self,
        employee_ids: Iterable[int],
        *,
        category: Optional[LeaveCategory] = None,
        statuses: Optional[Iterable[LeaveStatus]] = None,
    ) -> Sequence[LeaveRequest]:
        placeholders, ids = in_clause(int(i) for i in employee_ids)
        if not ids:
            return []
        clauses = [f"employee_id IN ({placeholders})"]
        params: List[object] = list(ids)
        self._filters(clauses, params, category, statuses)
        return self._list(clauses, params)
