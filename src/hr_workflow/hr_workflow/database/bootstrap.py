"""Schema and seed loading for `database/*.sql`.

Used by the app factory (AUTO_INIT_DB / AUTO_SEED_DB) and by the scripts in
`scripts/`. Files may carry `CREATE DATABASE` / `USE` lines; those are dropped
so the same file works against whatever database DB_CONFIG names.
"""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List

import mysql.connector

from .connection import DBConfig

log = logging.getLogger(__name__)

_DATABASE_LINES = re.compile(r"(?im)^\s*(CREATE\s+DATABASE|USE)\b[^;]*;\s*$")
_QUOTES = ("'", '"', "`")


def iter_sql_statements(sql: str) -> Iterator[str]:
    """Split a script on `;` and drop `-- ` comments, leaving quoted text untouched."""

    quote = None
    parts: List[str] = []
    start = 0
    i = 0
    while i < len(sql):
        ch = sql[i]
        if quote:
            if ch == "\\" and quote != "`":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in _QUOTES:
            quote = ch
        elif sql.startswith("--", i) and (i + 2 == len(sql) or sql[i + 2].isspace()):
            parts.append(sql[start:i])
            end = sql.find("\n", i)
            start = i = len(sql) if end == -1 else end
            continue
        elif ch == ";":
            parts.append(sql[start:i])
            stmt = "".join(parts).strip()
            parts = []
            if stmt:
                yield stmt
            start = i + 1
        i += 1

    parts.append(sql[start:])
    tail = "".join(parts).strip()
    if tail:
        yield tail


def prepare_script(sql: str) -> str:
    return _DATABASE_LINES.sub("", sql)


@contextmanager
def _session(db_config: dict, *, with_database: bool = True):
    target = DBConfig.from_dict(db_config)
    conn = mysql.connector.connect(**target.connect_kwargs(with_database=with_database))
    try:
        yield conn, conn.cursor()
    finally:
        conn.close()


def _run_script(db_config: dict, path: str | Path) -> int:
    statements = list(iter_sql_statements(prepare_script(Path(path).read_text(encoding="utf-8"))))
    with _session(db_config) as (conn, cur):
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    return len(statements)


def ensure_database_exists(db_config: dict) -> None:
    name = DBConfig.from_dict(db_config).database
    with _session(db_config, with_database=False) as (conn, cur):
        cur.execute(f"CREATE DATABASE IF NOT EXISTS `{name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci")
        conn.commit()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    count = _run_script(db_config, schema_path)
    log.info("Applied %s schema statements from %s", count, schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    count = _run_script(db_config, seed_path)
    log.info("Applied %s seed statements from %s", count, seed_path)


def list_tables(db_config: dict) -> List[str]:
    with _session(db_config) as (_, cur):
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
