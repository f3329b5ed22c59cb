from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import active_clause, build_set_clause, db_cursor, fetchall, fetchone, translate_duplicates
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    a.attendance_id, a.employee_id, a.work_date, a.clock_in, a.clock_out, a.status, a.note,
    a.deleted_at, a.created_at, a.updated_at
"""

_DUPLICATE = "Attendance already recorded for this employee on this date"


def _row_to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        clock_in=r.get("clock_in"),
        clock_out=r.get("clock_out"),
        status=AttendanceStatus(r["status"]),
        note=r.get("note"),
        deleted_at=r.get("deleted_at"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, attendance_id: int, *, include_deleted: bool = False) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records a
                WHERE a.attendance_id=%s AND {active_clause("a", include_deleted)}
                """,
                (int(attendance_id),),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records a
                WHERE a.employee_id=%s AND a.work_date=%s AND a.deleted_at IS NULL
                """,
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def create(
        self,
        *,
        employee_id: int,
        work_date: date,
        clock_in: Optional[datetime],
        clock_out: Optional[datetime],
        status: AttendanceStatus,
        note: Optional[str] = None,
    ) -> int:
        with translate_duplicates(_DUPLICATE), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(employee_id, work_date, clock_in, clock_out, status, note)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(employee_id), work_date, clock_in, clock_out, status.value, note),
            )
            return int(cur.lastrowid)

    def set_clock_out(self, *, attendance_id: int, clock_out: datetime, note: Optional[str] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET clock_out=%s, note=COALESCE(%s, note), updated_at=%s
                WHERE attendance_id=%s AND clock_out IS NULL AND deleted_at IS NULL
                """,
                (clock_out, note, datetime.now(), int(attendance_id)),
            )
            return cur.rowcount > 0

    def update_fields(self, attendance_id: int, fields: Dict[str, Any]) -> bool:
        if not fields:
            return True
        set_sql, params = build_set_clause(fields)
        with translate_duplicates(_DUPLICATE), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE attendance_records SET {set_sql} WHERE attendance_id=%s AND deleted_at IS NULL",
                (*params, int(attendance_id)),
            )
            return cur.rowcount > 0

    def soft_delete(self, attendance_id: int, *, deleted_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_records SET deleted_at=%s WHERE attendance_id=%s AND deleted_at IS NULL",
                (deleted_at, int(attendance_id)),
            )
            return cur.rowcount > 0

    def restore(self, attendance_id: int) -> bool:
        with translate_duplicates(_DUPLICATE), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_records SET deleted_at=NULL WHERE attendance_id=%s AND deleted_at IS NOT NULL",
                (int(attendance_id),),
            )
            return cur.rowcount > 0

    def purge(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount > 0

    def list_records(
        self,
        *,
        employee_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[AttendanceStatus] = None,
        open_only: bool = False,
        include_deleted: bool = False,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = [active_clause("a", include_deleted)]
        params: list[object] = []

        if employee_id is not None:
            clauses.append("a.employee_id=%s")
            params.append(int(employee_id))
        if start_date is not None:
            clauses.append("a.work_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("a.work_date <= %s")
            params.append(end_date)
        if status is not None:
            clauses.append("a.status=%s")
            params.append(status.value)
        if open_only:
            clauses.append("a.clock_in IS NOT NULL AND a.clock_out IS NULL")

        sql = f"""
            SELECT {_COLUMNS}
            FROM attendance_records a
            WHERE {" AND ".join(clauses)}
            ORDER BY a.work_date DESC, a.attendance_id DESC
        """
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_record(r) for r in fetchall(cur)]
