from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from ..common.datetime_utils import now_local
from ..common.validators import require_date_order, to_money
from ..core.constants import DEFAULT_PAYROLL_OVERDUE_DAYS, DEFAULT_RECENT_LIMIT, DEFAULT_STALE_DRAFT_DAYS
from ..core.enums import UNDELETABLE_PAYROLL_STATUSES, PayrollStatus
from ..core.exceptions import ConflictError, DomainError, NotFoundError, StateError
from ..core.transitions import PAYROLL_TRANSITIONS, require_transition
from ..employees.repository import EmployeeDirectory
from .calculator.base import NetPayCalculator
from .calculator.standard_calculator import StandardNetPayCalculator
from .model import PayrollItem, PayrollRecord, PayrollStatusSummary, PayrollUpdate
from .repository import PayrollRepository

log = logging.getLogger(__name__)

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class _Draft:
    employee_id: int
    pay_period_start: date
    pay_period_end: date
    salary: Decimal
    bonus: Decimal
    deductions: Decimal
    net_pay: Decimal

    @property
    def key(self) -> Tuple[int, date, date]:
        return self.employee_id, self.pay_period_start, self.pay_period_end


class PayrollService:
    """Payroll ledger.

    Lifecycle: DRAFT -> PENDING -> APPROVED -> PROCESSING -> COMPLETED | FAILED,
    with PENDING -> REJECTED as the other way out. Every transition is applied
    as a conditional update so two concurrent callers cannot both win.
    """

    def __init__(
        self,
        payroll: PayrollRepository,
        employees: EmployeeDirectory,
        *,
        calculator: Optional[NetPayCalculator] = None,
        overdue_days: int = DEFAULT_PAYROLL_OVERDUE_DAYS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._payroll = payroll
        self._employees = employees
        self._calculator = calculator or StandardNetPayCalculator()
        self._overdue_days = int(overdue_days)
        self._clock = clock

    # ---- intake -----------------------------------------------------

    def create(
        self,
        employee_id: int,
        period_start: date,
        period_end: date,
        salary: Any,
        bonus: Any = 0,
        deductions: Any = 0,
        net_pay: Any = None,
    ) -> PayrollRecord:
        draft = self._prepare(
            PayrollItem(
                employee_id=employee_id,
                pay_period_start=period_start,
                pay_period_end=period_end,
                salary=salary,
                bonus=bonus,
                deductions=deductions,
                net_pay=net_pay,
            )
        )
        payroll_id = self._insert(draft, PayrollStatus.DRAFT)
        log.info("Payroll %s: created DRAFT for employee %s (%s..%s)", payroll_id, employee_id, period_start, period_end)
        return self.get(payroll_id)

    def bulk_create(self, items: Iterable[PayrollItem]) -> List[PayrollRecord]:
        """Create every acceptable item as PENDING and skip the rest.

        Items are skipped (and logged) when invalid, for an unknown employee, or
        for an employee-period that already exists or appears earlier in the batch.
        """

        created: List[PayrollRecord] = []
        seen: Set[Tuple[int, date, date]] = set()

        for index, item in enumerate(items):
            try:
                draft = self._prepare(item)
                if draft.key in seen:
                    raise ConflictError("Duplicate employee and pay period within the batch")
                seen.add(draft.key)
                payroll_id = self._insert(draft, PayrollStatus.PENDING)
            except DomainError as e:
                log.warning("Payroll bulk item %s skipped (employee %s): %s", index, item.employee_id, e)
                continue
            created.append(self.get(payroll_id))

        log.info("Payroll bulk intake: %s created", len(created))
        return created

    def update(self, payroll_id: int, changes: PayrollUpdate) -> PayrollRecord:
        rec = self.get(payroll_id)

        employee_id = changes.employee_id if changes.employee_id is not None else rec.employee_id
        period_start = changes.pay_period_start or rec.pay_period_start
        period_end = changes.pay_period_end or rec.pay_period_end
        require_date_order(period_start, period_end, start_name="Pay period start", end_name="Pay period end")

        salary = to_money(changes.salary, "Salary") if changes.salary is not None else rec.salary
        bonus = to_money(changes.bonus, "Bonus") if changes.bonus is not None else rec.bonus
        deductions = to_money(changes.deductions, "Deductions") if changes.deductions is not None else rec.deductions
        if changes.net_pay is not None:
            net_pay = to_money(changes.net_pay, "Net pay")
        else:
            net_pay = to_money(
                self._calculator.net_pay(salary=salary, bonus=bonus, deductions=deductions), "Net pay", allow_negative=True
            )

        if employee_id != rec.employee_id:
            self._require_employee(employee_id)
        if (employee_id, period_start, period_end) != (rec.employee_id, rec.pay_period_start, rec.pay_period_end):
            self._require_free_period(employee_id, period_start, period_end, exclude_id=rec.payroll_id)

        merged = {
            "employee_id": employee_id,
            "pay_period_start": period_start,
            "pay_period_end": period_end,
            "salary": salary,
            "bonus": bonus,
            "deductions": deductions,
            "net_pay": net_pay,
        }
        fields = {k: v for k, v in merged.items() if getattr(rec, k) != v}
        if fields:
            self._payroll.update_fields(rec.payroll_id, fields)
            log.info("Payroll %s: updated %s", rec.payroll_id, ", ".join(sorted(fields)))
        return self.get(rec.payroll_id)

    # ---- lifecycle --------------------------------------------------

    def submit(self, payroll_id: int) -> PayrollRecord:
        return self._transition(payroll_id, PayrollStatus.PENDING)

    def approve(self, payroll_id: int) -> PayrollRecord:
        return self._transition(payroll_id, PayrollStatus.APPROVED, processed_date=self._clock().date())

    def reject(self, payroll_id: int) -> PayrollRecord:
        return self._transition(payroll_id, PayrollStatus.REJECTED)

    def process(self, payroll_id: int) -> PayrollRecord:
        return self._transition(payroll_id, PayrollStatus.PROCESSING)

    def complete(self, payroll_id: int) -> PayrollRecord:
        return self._transition(payroll_id, PayrollStatus.COMPLETED, paid_at=self._clock())

    def fail(self, payroll_id: int) -> PayrollRecord:
        return self._transition(payroll_id, PayrollStatus.FAILED)

    def bulk_approve(self, payroll_ids: Sequence[int]) -> List[PayrollRecord]:
        """Approve all or none: every id must exist and be PENDING before any is touched."""

        records = [self.get(pid) for pid in payroll_ids]
        for rec in records:
            require_transition(PAYROLL_TRANSITIONS, rec.status, PayrollStatus.APPROVED, what=f"Payroll {rec.payroll_id}")
        return [self.approve(rec.payroll_id) for rec in records]

    def _transition(self, payroll_id: int, target: PayrollStatus, **fields: Any) -> PayrollRecord:
        rec = self.get(payroll_id)
        require_transition(PAYROLL_TRANSITIONS, rec.status, target, what=f"Payroll {rec.payroll_id}")

        if not self._payroll.transition(rec.payroll_id, current=rec.status, target=target, fields=fields):
            self._raise_lost_race(rec.payroll_id, target)
        log.info("Payroll %s: %s -> %s", rec.payroll_id, rec.status.value, target.value)
        return self.get(rec.payroll_id)

    def delete(self, payroll_id: int) -> None:
        rec = self.get(payroll_id)
        if rec.status in UNDELETABLE_PAYROLL_STATUSES:
            raise StateError(f"Cannot delete payroll {rec.payroll_id} while {rec.status.value}", current=rec.status)

        if not self._payroll.soft_delete(
            rec.payroll_id, deleted_at=self._clock(), protected=UNDELETABLE_PAYROLL_STATUSES
        ):
            current = self.get(rec.payroll_id, include_deleted=True)
            raise StateError(f"Cannot delete payroll {rec.payroll_id} while {current.status.value}", current=current.status)
        log.info("Payroll %s: deleted", rec.payroll_id)

    def restore(self, payroll_id: int) -> PayrollRecord:
        rec = self.get(payroll_id, include_deleted=True)
        if not rec.is_deleted:
            return rec

        self._require_free_period(rec.employee_id, rec.pay_period_start, rec.pay_period_end, exclude_id=rec.payroll_id)
        self._payroll.restore(rec.payroll_id)
        log.info("Payroll %s: restored", rec.payroll_id)
        return self.get(rec.payroll_id)

    # ---- read side --------------------------------------------------

    def get(self, payroll_id: int, *, include_deleted: bool = False) -> PayrollRecord:
        rec = self._payroll.get(int(payroll_id), include_deleted=include_deleted)
        if not rec:
            raise NotFoundError(f"Payroll {payroll_id} not found")
        return rec

    def list_for_employee(self, employee_id: int, *, include_deleted: bool = False) -> Sequence[PayrollRecord]:
        return self._payroll.list_records(employee_id=employee_id, include_deleted=include_deleted)

    def list_by_status(self, status: PayrollStatus) -> Sequence[PayrollRecord]:
        return self._payroll.list_records(statuses={status})

    def list_for_period(self, period_start: date, period_end: date) -> Sequence[PayrollRecord]:
        return self._payroll.list_records(period_start=period_start, period_end=period_end)

    def overdue(self, cutoff_days: int | None = None, *, today: date | None = None) -> Sequence[PayrollRecord]:
        """APPROVED records whose processed date is older than the cutoff."""

        days = self._overdue_days if cutoff_days is None else int(cutoff_days)
        cutoff = (today or self._clock().date()) - timedelta(days=days)
        return self._payroll.list_records(statuses={PayrollStatus.APPROVED}, processed_before=cutoff)

    def stale_drafts(self, days: int = DEFAULT_STALE_DRAFT_DAYS) -> Sequence[PayrollRecord]:
        cutoff = self._clock() - timedelta(days=int(days))
        return self._payroll.list_records(statuses={PayrollStatus.DRAFT}, created_before=cutoff)

    def summary_by_status(self, start_date: date, end_date: date) -> List[PayrollStatusSummary]:
        require_date_order(start_date, end_date)
        records = self._payroll.list_records(starts_from=start_date, starts_to=end_date)

        totals: Dict[PayrollStatus, List[PayrollRecord]] = {}
        for rec in records:
            totals.setdefault(rec.status, []).append(rec)

        return [
            PayrollStatusSummary(
                status=status,
                records=len(totals[status]),
                gross_total=sum((r.gross_pay for r in totals[status]), ZERO),
                net_total=sum((r.net_pay for r in totals[status]), ZERO),
            )
            for status in PayrollStatus
            if status in totals
        ]

    def annual_net_pay(self, employee_id: int, year: int) -> Decimal:
        """Net pay actually paid out (COMPLETED) for periods starting in `year`."""

        records = self._payroll.list_records(
            employee_id=employee_id,
            statuses={PayrollStatus.COMPLETED},
            starts_from=date(int(year), 1, 1),
            starts_to=date(int(year), 12, 31),
        )
        return sum((r.net_pay for r in records), ZERO)

    def recent(self, *, limit: int = DEFAULT_RECENT_LIMIT) -> Sequence[PayrollRecord]:
        return self._payroll.list_records(limit=int(limit))

    # ---- helpers ----------------------------------------------------

    def _prepare(self, item: PayrollItem) -> _Draft:
        self._require_employee(item.employee_id)
        require_date_order(
            item.pay_period_start, item.pay_period_end, start_name="Pay period start", end_name="Pay period end"
        )
        salary = to_money(item.salary, "Salary")
        bonus = to_money(item.bonus if item.bonus is not None else 0, "Bonus")
        deductions = to_money(item.deductions if item.deductions is not None else 0, "Deductions")
        if item.net_pay is not None:
            net_pay = to_money(item.net_pay, "Net pay")
        else:
            net_pay = to_money(
                self._calculator.net_pay(salary=salary, bonus=bonus, deductions=deductions), "Net pay", allow_negative=True
            )

        self._require_free_period(item.employee_id, item.pay_period_start, item.pay_period_end)
        return _Draft(
            employee_id=item.employee_id,
            pay_period_start=item.pay_period_start,
            pay_period_end=item.pay_period_end,
            salary=salary,
            bonus=bonus,
            deductions=deductions,
            net_pay=net_pay,
        )

    def _insert(self, draft: _Draft, status: PayrollStatus) -> int:
        return self._payroll.create(
            employee_id=draft.employee_id,
            pay_period_start=draft.pay_period_start,
            pay_period_end=draft.pay_period_end,
            salary=draft.salary,
            bonus=draft.bonus,
            deductions=draft.deductions,
            net_pay=draft.net_pay,
            status=status,
        )

    def _require_employee(self, employee_id: int) -> None:
        if not self._employees.exists(employee_id):
            raise NotFoundError(f"Employee {employee_id} not found")

    def _require_free_period(
        self, employee_id: int, period_start: date, period_end: date, *, exclude_id: Optional[int] = None
    ) -> None:
        existing = self._payroll.find_for_period(employee_id, period_start, period_end)
        if existing and existing.payroll_id != exclude_id:
            raise ConflictError(
                f"Payroll already exists for employee {employee_id} for {period_start}..{period_end}",
                conflicts=[existing],
            )

    def _raise_lost_race(self, payroll_id: int, target: PayrollStatus) -> None:
        current = self.get(payroll_id, include_deleted=True)
        raise StateError(
            f"Payroll {payroll_id} cannot move from {current.status.value} to {target.value}",
            current=current.status,
        )
