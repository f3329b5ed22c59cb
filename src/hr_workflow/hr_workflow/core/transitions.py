"""Allowed lifecycle edges.

Every transition operation consults one of these tables, so adding or auditing
an edge happens here and nowhere else.
"""

from __future__ import annotations

from typing import Mapping, TypeVar

from .enums import LeaveStatus, PayrollStatus
from .exceptions import StateError

S = TypeVar("S")

LEAVE_TRANSITIONS: Mapping[LeaveStatus, frozenset[LeaveStatus]] = {
    LeaveStatus.PENDING: frozenset({LeaveStatus.APPROVED, LeaveStatus.REJECTED, LeaveStatus.CANCELLED}),
    LeaveStatus.APPROVED: frozenset(),
    LeaveStatus.REJECTED: frozenset(),
    LeaveStatus.CANCELLED: frozenset(),
}

PAYROLL_TRANSITIONS: Mapping[PayrollStatus, frozenset[PayrollStatus]] = {
    PayrollStatus.DRAFT: frozenset({PayrollStatus.PENDING}),
    PayrollStatus.PENDING: frozenset({PayrollStatus.APPROVED, PayrollStatus.REJECTED}),
    PayrollStatus.APPROVED: frozenset({PayrollStatus.PROCESSING}),
    PayrollStatus.PROCESSING: frozenset({PayrollStatus.COMPLETED, PayrollStatus.FAILED}),
    PayrollStatus.COMPLETED: frozenset(),
    PayrollStatus.REJECTED: frozenset(),
    PayrollStatus.FAILED: frozenset(),
}


def can_transition(table: Mapping[S, frozenset[S]], current: S, target: S) -> bool:
    return target in table.get(current, frozenset())


def require_transition(table: Mapping[S, frozenset[S]], current: S, target: S, *, what: str) -> None:
    if not can_transition(table, current, target):
        raise StateError(
            f"{what} cannot move from {_name(current)} to {_name(target)}",
            current=current,
        )


def _name(status) -> str:
    return getattr(status, "value", str(status))
