from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator, List

import mysql.connector

from .connection import DBConfig

logger = logging.getLogger(__name__)

_CREATE_DB_RE = re.compile(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$")
_USE_DB_RE = re.compile(r"(?im)^\s*USE\b.*?;\s*$")


def _connect(db_config: dict, *, with_database: bool = True):
    cfg = DBConfig.from_dict(db_config)
    kwargs = dict(host=cfg.host, port=cfg.port, user=cfg.user, password=cfg.password, use_pure=True)
    if with_database:
        kwargs["database"] = cfg.database
    return mysql.connector.connect(**kwargs)


def _without_database_statements(sql: str) -> str:
    # schema.sql/seed.sql may name a database; the configured one always wins.
    return _USE_DB_RE.sub("", _CREATE_DB_RE.sub("", sql))


def split_sql_statements(sql: str) -> Iterator[str]:
    """Split a script on ';' outside quoted strings and '--' line comments."""
    buf: List[str] = []
    quote = None
    escape = False
    in_comment = False
    prev = ""

    for ch in sql:
        if in_comment:
            if ch == "\n":
                in_comment = False
                buf.append(ch)
            prev = ch
            continue
        if escape:
            buf.append(ch)
            escape = False
        elif quote:
            buf.append(ch)
            if ch == "\\":
                escape = True
            elif ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
            buf.append(ch)
        elif ch == "-" and prev == "-":
            buf.pop()
            in_comment = True
        elif ch == ";":
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
        else:
            buf.append(ch)
        prev = ch

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _run_script(db_config: dict, path: Path) -> int:
    sql = _without_database_statements(Path(path).read_text(encoding="utf-8"))
    conn = _connect(db_config)
    count = 0
    try:
        cur = conn.cursor()
        for stmt in split_sql_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
    finally:
        conn.close()
    return count


def ensure_database_exists(db_config: dict) -> None:
    database = DBConfig.from_dict(db_config).database
    conn = _connect(db_config, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(f"CREATE DATABASE IF NOT EXISTS `{database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci")
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    count = _run_script(db_config, Path(schema_path))
    logger.info("Applied schema %s (%d statements)", schema_path, count)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    count = _run_script(db_config, Path(seed_path))
    logger.info("Applied seed %s (%d statements)", seed_path, count)


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(db_config)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
