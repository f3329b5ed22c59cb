from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import AbstractSet, Any, Dict, Optional, Protocol, Sequence

from ..core.enums import PayrollStatus
from .model import PayrollRecord


class PayrollRepository(Protocol):
    def get(self, payroll_id: int, *, include_deleted: bool = False) -> Optional[PayrollRecord]:
        raise NotImplementedError

    def find_for_period(self, employee_id: int, period_start: date, period_end: date) -> Optional[PayrollRecord]:
        """Active record for exactly this employee and period."""

        raise NotImplementedError

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
        """Insert; raises ConflictError if the employee-period is already taken."""

        raise NotImplementedError

    def update_fields(self, payroll_id: int, fields: Dict[str, Any]) -> bool:
        raise NotImplementedError

    def transition(
        self,
        payroll_id: int,
        *,
        current: PayrollStatus,
        target: PayrollStatus,
        fields: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """Conditional status change; False when the row is no longer in `current`."""

        raise NotImplementedError

    def soft_delete(
        self, payroll_id: int, *, deleted_at: datetime, protected: AbstractSet[PayrollStatus]
    ) -> bool:
        """Soft delete unless the row is in one of the `protected` statuses."""

        raise NotImplementedError

    def restore(self, payroll_id: int) -> bool:
        raise NotImplementedError

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
        """Ordered by pay_period_start DESC, newest first."""

        raise NotImplementedError
