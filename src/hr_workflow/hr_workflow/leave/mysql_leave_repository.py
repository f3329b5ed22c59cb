from __future__ import annotations

from datetime import date, datetime
from typing import AbstractSet, Any, Dict, List, Optional, Sequence, Tuple

from ..core.constants import LEAVE_LOCK_TIMEOUT_SECONDS
from ..core.enums import BLOCKING_LEAVE_STATUSES, LeaveStatus, LeaveType
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    active_clause,
    build_set_clause,
    db_cursor,
    fetchall,
    fetchone,
    in_clause,
    named_lock,
)
from .model import LeaveRequest
from .repository import LeaveRepository

_COLUMNS = """
    l.leave_id, l.employee_id, l.leave_type, l.start_date, l.end_date, l.total_days, l.reason,
    l.status, l.approver_id, l.request_date, l.response_date, l.comments,
    l.deleted_at, l.created_at, l.updated_at
"""


def _row_to_request(r: Dict[str, Any]) -> LeaveRequest:
    return LeaveRequest(
        leave_id=int(r["leave_id"]),
        employee_id=int(r["employee_id"]),
        leave_type=LeaveType(r["leave_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        total_days=int(r["total_days"]),
        reason=r.get("reason"),
        status=LeaveStatus(r["status"]),
        request_date=r["request_date"],
        approver_id=int(r["approver_id"]) if r.get("approver_id") is not None else None,
        response_date=r.get("response_date"),
        comments=r.get("comments"),
        deleted_at=r.get("deleted_at"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _lock_name(employee_id: int) -> str:
    return f"hr_workflow.leave.employee.{int(employee_id)}"


def _overlap_error(conflicts: Sequence[LeaveRequest]) -> ConflictError:
    return ConflictError("Leave request overlaps an existing pending or approved request", conflicts=conflicts)


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, leave_id: int, *, include_deleted: bool = False) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests l
                WHERE l.leave_id=%s AND {active_clause("l", include_deleted)}
                """,
                (int(leave_id),),
            )
            r = fetchone(cur)
            return _row_to_request(r) if r else None

    def _overlapping(
        self, cur, employee_id: int, start_date: date, end_date: date, exclude_id: Optional[int]
    ) -> List[LeaveRequest]:
        blocking = [s.value for s in BLOCKING_LEAVE_STATUSES]
        sql = f"""
            SELECT {_COLUMNS}
            FROM leave_requests l
            WHERE l.employee_id=%s
              AND l.deleted_at IS NULL
              AND l.status IN ({in_clause(blocking)})
              AND l.start_date <= %s AND l.end_date >= %s
        """
        params: list[object] = [int(employee_id), *blocking, end_date, start_date]
        if exclude_id is not None:
            sql += " AND l.leave_id <> %s"
            params.append(int(exclude_id))
        cur.execute(sql + " ORDER BY l.start_date", tuple(params))
        return [_row_to_request(r) for r in fetchall(cur)]

    def find_overlapping(
        self,
        employee_id: int,
        start_date: date,
        end_date: date,
        *,
        exclude_id: Optional[int] = None,
    ) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._overlapping(cur, employee_id, start_date, end_date, exclude_id)

    def create(
        self,
        *,
        employee_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        total_days: int,
        reason: Optional[str],
        request_date: date,
    ) -> int:
        with db_cursor(self._conn_factory) as (conn, cur):
            with named_lock(conn, cur, _lock_name(employee_id), timeout=LEAVE_LOCK_TIMEOUT_SECONDS):
                conflicts = self._overlapping(cur, employee_id, start_date, end_date, None)
                if conflicts:
                    raise _overlap_error(conflicts)
                cur.execute(
                    """
                    INSERT INTO leave_requests(
                        employee_id, leave_type, start_date, end_date, total_days, reason, status, request_date
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(employee_id),
                        leave_type.value,
                        start_date,
                        end_date,
                        int(total_days),
                        reason,
                        LeaveStatus.PENDING.value,
                        request_date,
                    ),
                )
                return int(cur.lastrowid)

    def update_pending(
        self,
        leave_id: int,
        fields: Dict[str, Any],
        *,
        overlap_window: Optional[Tuple[int, date, date]] = None,
    ) -> bool:
        set_sql, params = build_set_clause(fields)
        sql = f"UPDATE leave_requests SET {set_sql} WHERE leave_id=%s AND status=%s AND deleted_at IS NULL"
        args = (*params, int(leave_id), LeaveStatus.PENDING.value)

        with db_cursor(self._conn_factory) as (conn, cur):
            if overlap_window is None:
                cur.execute(sql, args)
                return cur.rowcount > 0

            employee_id, start_date, end_date = overlap_window
            with named_lock(conn, cur, _lock_name(employee_id), timeout=LEAVE_LOCK_TIMEOUT_SECONDS):
                conflicts = self._overlapping(cur, employee_id, start_date, end_date, leave_id)
                if conflicts:
                    raise _overlap_error(conflicts)
                cur.execute(sql, args)
                return cur.rowcount > 0

    def transition(
        self,
        leave_id: int,
        *,
        current: LeaveStatus,
        target: LeaveStatus,
        response_date: date,
        comments: Optional[str],
        approver_id: Optional[int] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, approver_id=COALESCE(%s, approver_id), response_date=%s,
                    comments=COALESCE(%s, comments), updated_at=%s
                WHERE leave_id=%s AND status=%s AND deleted_at IS NULL
                """,
                (
                    target.value,
                    approver_id,
                    response_date,
                    comments,
                    datetime.now(),
                    int(leave_id),
                    current.value,
                ),
            )
            return cur.rowcount > 0

    def soft_delete(self, leave_id: int, *, deleted_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE leave_requests SET deleted_at=%s WHERE leave_id=%s AND deleted_at IS NULL",
                (deleted_at, int(leave_id)),
            )
            return cur.rowcount > 0

    def restore(self, leave_id: int, *, check_overlap: bool) -> bool:
        sql = "UPDATE leave_requests SET deleted_at=NULL WHERE leave_id=%s AND deleted_at IS NOT NULL"

        with db_cursor(self._conn_factory) as (conn, cur):
            if not check_overlap:
                cur.execute(sql, (int(leave_id),))
                return cur.rowcount > 0

            cur.execute(
                "SELECT employee_id, start_date, end_date FROM leave_requests WHERE leave_id=%s",
                (int(leave_id),),
            )
            r = fetchone(cur)
            if not r:
                return False
            with named_lock(conn, cur, _lock_name(r["employee_id"]), timeout=LEAVE_LOCK_TIMEOUT_SECONDS):
                conflicts = self._overlapping(cur, int(r["employee_id"]), r["start_date"], r["end_date"], leave_id)
                if conflicts:
                    raise _overlap_error(conflicts)
                cur.execute(sql, (int(leave_id),))
                return cur.rowcount > 0

    def list_requests(
        self,
        *,
        employee_id: Optional[int] = None,
        statuses: Optional[AbstractSet[LeaveStatus]] = None,
        leave_type: Optional[LeaveType] = None,
        approver_id: Optional[int] = None,
        starts_from: Optional[date] = None,
        starts_to: Optional[date] = None,
        overlapping: Optional[Tuple[date, date]] = None,
        requested_before: Optional[date] = None,
        include_deleted: bool = False,
        oldest_first: bool = False,
        limit: Optional[int] = None,
    ) -> Sequence[LeaveRequest]:
        clauses = [active_clause("l", include_deleted)]
        params: list[object] = []

        if employee_id is not None:
            clauses.append("l.employee_id=%s")
            params.append(int(employee_id))
        if statuses:
            values = sorted(s.value for s in statuses)
            clauses.append(f"l.status IN ({in_clause(values)})")
            params.extend(values)
        if leave_type is not None:
            clauses.append("l.leave_type=%s")
            params.append(leave_type.value)
        if approver_id is not None:
            clauses.append("l.approver_id=%s")
            params.append(int(approver_id))
        if starts_from is not None:
            clauses.append("l.start_date >= %s")
            params.append(starts_from)
        if starts_to is not None:
            clauses.append("l.start_date <= %s")
            params.append(starts_to)
        if overlapping is not None:
            clauses.append("l.start_date <= %s AND l.end_date >= %s")
            params.extend([overlapping[1], overlapping[0]])
        if requested_before is not None:
            clauses.append("l.request_date < %s")
            params.append(requested_before)

        direction = "ASC" if oldest_first else "DESC"
        sql = f"""
            SELECT {_COLUMNS}
            FROM leave_requests l
            WHERE {" AND ".join(clauses)}
            ORDER BY l.request_date {direction}, l.leave_id {direction}
        """
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_request(r) for r in fetchall(cur)]
