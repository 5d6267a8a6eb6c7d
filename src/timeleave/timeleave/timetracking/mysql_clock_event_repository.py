from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import ClockEventSource, ClockEventType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ClockEvent
from .repository import ClockEventLedger

_COLUMNS = """
    event_id, employee_id, event_type, event_time, source, terminal_id,
    notes, is_modified, modified_by, created_at
"""


def _to_event(r: Dict[str, Any]) -> ClockEvent:
    return ClockEvent(
        event_id=int(r["event_id"]),
        employee_id=int(r["employee_id"]),
        event_type=ClockEventType(r["event_type"]),
        timestamp=r["event_time"],
        source=ClockEventSource(r["source"]),
        terminal_id=r.get("terminal_id"),
        notes=r.get("notes"),
        is_modified=bool(r.get("is_modified")),
        modified_by=int(r["modified_by"]) if r.get("modified_by") is not None else None,
        created_at=r.get("created_at"),
    )


class MySQLClockEventLedger(ClockEventLedger):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def latest_for_employee(self, employee_id: int) -> Optional[ClockEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM clock_events
                WHERE employee_id=%s
                ORDER BY event_time DESC, event_id DESC
                LIMIT 1
                """,
                (int(employee_id),),
            )
            r = fetchone(cur)
            return _to_event(r) if r else None

    def latest_before(self, employee_id: int, before: datetime) -> Optional[ClockEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM clock_events
                WHERE employee_id=%s AND event_time < %s
                ORDER BY event_time DESC, event_id DESC
                LIMIT 1
                """,
                (int(employee_id), before),
            )
            r = fetchone(cur)
            return _to_event(r) if r else None

    def list_between(self, employee_id: int, start: datetime, end: datetime) -> Sequence[ClockEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM clock_events
                WHERE employee_id=%s AND event_time >= %s AND event_time < %s
                ORDER BY event_time ASC, event_id ASC
                """,
                (int(employee_id), start, end),
            )
            return [_to_event(r) for r in fetchall(cur)]

    def get_by_id(self, event_id: int) -> Optional[ClockEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM clock_events WHERE event_id=%s", (int(event_id),))
            r = fetchone(cur)
            return _to_event(r) if r else None

    def append(
        self,
        *,
        employee_id: int,
        event_type: ClockEventType,
        timestamp: datetime,
        source: ClockEventSource,
        terminal_id: Optional[str] = None,
        notes: Optional[str] = None,
        is_modified: bool = False,
        modified_by: Optional[int] = None,
    ) -> ClockEvent:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO clock_events(
                    employee_id, event_type, event_time, source, terminal_id,
                    notes, is_modified, modified_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    event_type.value,
                    timestamp,
                    source.value,
                    terminal_id,
                    notes,
                    1 if is_modified else 0,
                    modified_by,
                ),
            )
            event_id = int(cur.lastrowid)
            cur.execute(f"SELECT {_COLUMNS} FROM clock_events WHERE event_id=%s", (event_id,))
            return _to_event(fetchone(cur))

    def update(self, event: ClockEvent) -> ClockEvent:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE clock_events
                SET event_type=%s, event_time=%s, notes=%s, is_modified=%s, modified_by=%s
                WHERE event_id=%s
                """,
                (
                    event.event_type.value,
                    event.timestamp,
                    event.notes,
                    1 if event.is_modified else 0,
                    event.modified_by,
                    int(event.event_id),
                ),
            )
        return event

    def delete(self, event_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM clock_events WHERE event_id=%s", (int(event_id),))
            return cur.rowcount > 0
