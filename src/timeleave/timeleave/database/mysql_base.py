from __future__ import annotations

from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    shared = conn_factory.current()
    if shared is not None:
        # Part of an open transaction; commit/rollback belong to it.
        cur = shared.cursor(dictionary=dictionary)
        try:
            yield shared, cur
        finally:
            cur.close()
        return

    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def as_decimal(value: Any) -> Decimal:
    """MySQL DECIMAL columns come back as Decimal, but tolerate float/str from drivers."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def parse_work_days(value: Any) -> Optional[frozenset]:
    """Work days are stored as a comma list of ISO weekdays, e.g. '1,2,3,4,5'."""
    if value is None:
        return None
    text = str(value).strip().strip("[]")
    if not text:
        return None
    return frozenset(int(part) for part in text.split(",") if part.strip())


def in_clause(values: Iterable[Any]) -> tuple[str, list]:
    items = list(values)
    return ",".join(["%s"] * len(items)), items
