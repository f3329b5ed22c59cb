from __future__ import annotations

from datetime import date, datetime
from typing import AbstractSet, Any, Dict, Optional, Protocol, Sequence, Tuple

from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveRequest


class LeaveRepository(Protocol):
    def get(self, leave_id: int, *, include_deleted: bool = False) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def find_overlapping(
        self,
        employee_id: int,
        start_date: date,
        end_date: date,
        *,
        exclude_id: Optional[int] = None,
    ) -> Sequence[LeaveRequest]:
        """Active PENDING/APPROVED requests of the employee overlapping [start, end]."""

        raise NotImplementedError

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
        """Insert a PENDING request.

        Implementations re-check overlap atomically with the insert and raise
        ConflictError carrying the overlapping requests.
        """

        raise NotImplementedError

    def update_pending(
        self,
        leave_id: int,
        fields: Dict[str, Any],
        *,
        overlap_window: Optional[Tuple[int, date, date]] = None,
    ) -> bool:
        """Apply `fields` only while the request is still PENDING.

        `overlap_window` = (employee_id, start, end) asks for an atomic overlap
        re-check that excludes this request.
        """

        raise NotImplementedError

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
        """Conditional status change; False when the row is no longer in `current`."""

        raise NotImplementedError

    def soft_delete(self, leave_id: int, *, deleted_at: datetime) -> bool:
        raise NotImplementedError

    def restore(self, leave_id: int, *, check_overlap: bool) -> bool:
        raise NotImplementedError

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
        """Ordered by request_date (newest first unless `oldest_first`)."""

        raise NotImplementedError
