from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import AbstractSet, Any, Dict, Optional, Sequence

from ..core.enums import PayrollStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    active_clause,
    build_set_clause,
    db_cursor,
    fetchall,
    fetchone,
    in_clause,
    translate_duplicates,
)
from .model import PayrollRecord
from .repository import PayrollRepository

_COLUMNS = """
    p.payroll_id, p.employee_id, p.pay_period_start, p.pay_period_end,
    p.salary, p.bonus, p.deductions, p.net_pay, p.status, p.processed_date, p.paid_at,
    p.deleted_at, p.created_at, p.updated_at
"""

_DUPLICATE = "Payroll already exists for this employee and pay period"


def _money(value) -> Decimal:
    return Decimal(str(value if value is not None else 0))


def _row_to_record(r: Dict[str, Any]) -> PayrollRecord:
    return PayrollRecord(
        payroll_id=int(r["payroll_id"]),
        employee_id=int(r["employee_id"]),
        pay_period_start=r["pay_period_start"],
        pay_period_end=r["pay_period_end"],
        salary=_money(r["salary"]),
        bonus=_money(r.get("bonus")),
        deductions=_money(r.get("deductions")),
        net_pay=_money(r["net_pay"]),
        status=PayrollStatus(r["status"]),
        processed_date=r.get("processed_date"),
        paid_at=r.get("paid_at"),
        deleted_at=r.get("deleted_at"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, payroll_id: int, *, include_deleted: bool = False) -> Optional[PayrollRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM payroll_records p
                WHERE p.payroll_id=%s AND {active_clause("p", include_deleted)}
                """,
                (int(payroll_id),),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def find_for_period(self, employee_id: int, period_start: date, period_end: date) -> Optional[PayrollRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM payroll_records p
                WHERE p.employee_id=%s AND p.pay_period_start=%s AND p.pay_period_end=%s
                  AND p.deleted_at IS NULL
                """,
                (int(employee_id), period_start, period_end),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def create(
        self,
        *,
        employee_id: int,
        pay_period_start: date,
        pay_period_end: date,
        salary: Decimal,
        bonus: Decimal,
        deductions: Decimal,
        net_pay: Decimal,
        status: PayrollStatus,
    ) -> int:
        with translate_duplicates(_DUPLICATE), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payroll_records(
                    employee_id, pay_period_start, pay_period_end, salary, bonus, deductions, net_pay, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    pay_period_start,
                    pay_period_end,
                    salary,
                    bonus,
                    deductions,
                    net_pay,
                    status.value,
                ),
            )
            return int(cur.lastrowid)

    def update_fields(self, payroll_id: int, fields: Dict[str, Any]) -> bool:
        if not fields:
            return True
        set_sql, params = build_set_clause(fields)
        with translate_duplicates(_DUPLICATE), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE payroll_records SET {set_sql} WHERE payroll_id=%s AND deleted_at IS NULL",
                (*params, int(payroll_id)),
            )
            return cur.rowcount > 0

    def transition(
        self,
        payroll_id: int,
        *,
        current: PayrollStatus,
        target: PayrollStatus,
        fields: Optional[Dict[str, Any]] = None,
    ) -> bool:
        set_sql, params = build_set_clause({"status": target, **(fields or {})})
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE payroll_records SET {set_sql} WHERE payroll_id=%s AND status=%s AND deleted_at IS NULL",
                (*params, int(payroll_id), current.value),
            )
            return cur.rowcount > 0

    def soft_delete(
        self, payroll_id: int, *, deleted_at: datetime, protected: AbstractSet[PayrollStatus]
    ) -> bool:
        blocked = sorted(s.value for s in protected)
        sql = "UPDATE payroll_records SET deleted_at=%s WHERE payroll_id=%s AND deleted_at IS NULL"
        params: list[object] = [deleted_at, int(payroll_id)]
        if blocked:
            sql += f" AND status NOT IN ({in_clause(blocked)})"
            params.extend(blocked)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return cur.rowcount > 0

    def restore(self, payroll_id: int) -> bool:
        with translate_duplicates(_DUPLICATE), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE payroll_records SET deleted_at=NULL WHERE payroll_id=%s AND deleted_at IS NOT NULL",
                (int(payroll_id),),
            )
            return cur.rowcount > 0

    def list_records(
        self,
        *,
        employee_id: Optional[int] = None,
        statuses: Optional[AbstractSet[PayrollStatus]] = None,
        period_start: Optional[date] = None,
        period_end: Optional[date] = None,
        starts_from: Optional[date] = None,
        starts_to: Optional[date] = None,
        processed_before: Optional[date] = None,
        created_before: Optional[datetime] = None,
        include_deleted: bool = False,
        limit: Optional[int] = None,
    ) -> Sequence[PayrollRecord]:
        clauses = [active_clause("p", include_deleted)]
        params: list[object] = []

        if employee_id is not None:
            clauses.append("p.employee_id=%s")
            params.append(int(employee_id))
        if statuses:
            values = sorted(s.value for s in statuses)
            clauses.append(f"p.status IN ({in_clause(values)})")
            params.extend(values)
        if period_start is not None:
            clauses.append("p.pay_period_start=%s")
            params.append(period_start)
        if period_end is not None:
            clauses.append("p.pay_period_end=%s")
            params.append(period_end)
        if starts_from is not None:
            clauses.append("p.pay_period_start >= %s")
            params.append(starts_from)
        if starts_to is not None:
            clauses.append("p.pay_period_start <= %s")
            params.append(starts_to)
        if processed_before is not None:
            clauses.append("p.processed_date < %s")
            params.append(processed_before)
        if created_before is not None:
            clauses.append("p.created_at < %s")
            params.append(created_before)

        sql = f"""
            SELECT {_COLUMNS}
            FROM payroll_records p
            WHERE {" AND ".join(clauses)}
            ORDER BY p.pay_period_start DESC, p.payroll_id DESC
        """
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_record(r) for r in fetchall(cur)]
