from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from ..core.enums import PayrollStatus


@dataclass(frozen=True)
class PayrollRecord:
    """Pay for one employee over one pay period. Amounts are two-place Decimals."""

    payroll_id: int
    employee_id: int
    pay_period_start: date
    pay_period_end: date
    salary: Decimal
    bonus: Decimal
    deductions: Decimal
    net_pay: Decimal
    status: PayrollStatus
    processed_date: Optional[date] = None
    paid_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def gross_pay(self) -> Decimal:
        return self.salary + self.bonus

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def to_dict(self) -> dict:
        return {
            "payroll_id": self.payroll_id,
            "employee_id": self.employee_id,
            "pay_period_start": self.pay_period_start,
            "pay_period_end": self.pay_period_end,
            "salary": self.salary,
            "bonus": self.bonus,
            "deductions": self.deductions,
            "gross_pay": self.gross_pay,
            "net_pay": self.net_pay,
            "status": self.status,
            "processed_date": self.processed_date,
            "paid_at": self.paid_at,
            "deleted": self.is_deleted,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass(frozen=True)
class PayrollUpdate:
    employee_id: Optional[int] = None
    pay_period_start: Optional[date] = None
    pay_period_end: Optional[date] = None
    salary: Optional[Any] = None
    bonus: Optional[Any] = None
    deductions: Optional[Any] = None
    net_pay: Optional[Any] = None


@dataclass(frozen=True)
class PayrollItem:
    """One line of a bulk intake; amounts are coerced and validated on intake."""

    employee_id: int
    pay_period_start: date
    pay_period_end: date
    salary: Any
    bonus: Any = 0
    deductions: Any = 0
    net_pay: Optional[Any] = None


@dataclass(frozen=True)
class PayrollStatusSummary:
    status: PayrollStatus
    records: int
    gross_total: Decimal
    net_total: Decimal
