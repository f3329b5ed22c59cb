from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.exceptions import ConflictError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
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


@contextmanager
def named_lock(conn, cur, name: str, *, timeout: int):
    """Serialize writers on `name` for the lifetime of the current connection.

    MySQL named locks are connection scoped, so callers must run their check and
    write on the same cursor inside this block. The transaction is committed
    before the lock is released so the next holder sees the write.
    """

    cur.execute("SELECT GET_LOCK(%s, %s) AS acquired", (name, int(timeout)))
    row = cur.fetchone()
    acquired = row["acquired"] if isinstance(row, dict) else (row[0] if row else None)
    if acquired != 1:
        raise ConflictError(f"Another request is updating {name}; try again")
    try:
        yield
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        cur.execute("SELECT RELEASE_LOCK(%s) AS released", (name,))
        cur.fetchall()


@contextmanager
def translate_duplicates(message: str):
    """Turn unique-key violations from the storage layer into ConflictError."""

    try:
        yield
    except IntegrityError as e:
        if getattr(e, "errno", None) == errorcode.ER_DUP_ENTRY:
            raise ConflictError(message) from e
        raise


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def active_clause(alias: str, include_deleted: bool) -> str:
    return "1=1" if include_deleted else f"{alias}.deleted_at IS NULL"


def build_set_clause(fields: Dict[str, Any]) -> Tuple[str, List[Any]]:
    """Build `col=%s, ...` for a partial UPDATE, always stamping updated_at."""

    cols = [f"{col}=%s" for col in fields]
    params: List[Any] = [_db_value(v) for v in fields.values()]
    cols.append("updated_at=%s")
    params.append(datetime.now())
    return ", ".join(cols), params


def _db_value(value: Any) -> Any:
    # Enums are stored by value; mysql-connector handles date/datetime/Decimal.
    return value.value if isinstance(value, Enum) else value


def in_clause(values: Sequence[Any]) -> str:
    return ", ".join(["%s"] * len(values))
