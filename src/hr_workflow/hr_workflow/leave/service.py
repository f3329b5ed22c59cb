from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Optional, Sequence

from ..common.datetime_utils import inclusive_days, now_local
from ..common.validators import optional_text, require_date_order
from ..core.constants import DEFAULT_RECENT_LIMIT, DEFAULT_STALE_PENDING_DAYS
from ..core.enums import BLOCKING_LEAVE_STATUSES, LeaveStatus, LeaveType
from ..core.exceptions import ConflictError, NotFoundError, StateError
from ..core.transitions import LEAVE_TRANSITIONS, can_transition, require_transition
from ..employees.repository import EmployeeDirectory
from .model import LeaveBalance, LeaveRequest, LeaveTypeSummary, LeaveUpdate
from .repository import LeaveRepository

log = logging.getLogger(__name__)


class LeaveService:
    """Leave workflow.

    Requests start PENDING and are decided exactly once (approve, reject or
    cancel). While a request is PENDING or APPROVED it blocks overlapping
    requests of the same employee. Annual allowances are reported, not enforced.
    """

    def __init__(
        self,
        leaves: LeaveRepository,
        employees: EmployeeDirectory,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._leaves = leaves
        self._employees = employees
        self._clock = clock

    def _today(self) -> date:
        return self._clock().date()

    # ---- write side -------------------------------------------------

    def create(
        self,
        employee_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        reason: str | None = None,
        *,
        today: date | None = None,
    ) -> LeaveRequest:
        self._require_employee(employee_id)
        require_date_order(start_date, end_date)
        self._require_no_overlap(employee_id, start_date, end_date)

        leave_id = self._leaves.create(
            employee_id=employee_id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            total_days=inclusive_days(start_date, end_date),
            reason=optional_text(reason),
            request_date=today or self._today(),
        )
        log.info(
            "Leave %s: created %s for employee %s (%s..%s)",
            leave_id,
            leave_type.value,
            employee_id,
            start_date,
            end_date,
        )
        return self.get(leave_id)

    def update(self, leave_id: int, changes: LeaveUpdate) -> LeaveRequest:
        req = self.get(leave_id)
        self._require_pending(req, "updated")

        employee_id = changes.employee_id if changes.employee_id is not None else req.employee_id
        start_date = changes.start_date or req.start_date
        end_date = changes.end_date or req.end_date

        if employee_id != req.employee_id:
            self._require_employee(employee_id)
        require_date_order(start_date, end_date)

        window_changed = (employee_id, start_date, end_date) != (req.employee_id, req.start_date, req.end_date)
        if window_changed:
            self._require_no_overlap(employee_id, start_date, end_date, exclude_id=req.leave_id)

        fields: Dict[str, object] = {}
        if employee_id != req.employee_id:
            fields["employee_id"] = employee_id
        if changes.leave_type is not None and changes.leave_type != req.leave_type:
            fields["leave_type"] = changes.leave_type
        if start_date != req.start_date:
            fields["start_date"] = start_date
        if end_date != req.end_date:
            fields["end_date"] = end_date
        if window_changed:
            fields["total_days"] = inclusive_days(start_date, end_date)
        if changes.reason is not None:
            fields["reason"] = optional_text(changes.reason)

        if not fields:
            return req

        updated = self._leaves.update_pending(
            req.leave_id,
            fields,
            overlap_window=(employee_id, start_date, end_date) if window_changed else None,
        )
        if not updated:
            self._raise_lost_race(req.leave_id, "updated")
        log.info("Leave %s: updated %s", req.leave_id, ", ".join(sorted(fields)))
        return self.get(req.leave_id)

    def approve(self, leave_id: int, approver_id: int, comments: str | None = None) -> LeaveRequest:
        return self._decide(leave_id, approver_id, LeaveStatus.APPROVED, comments)

    def reject(self, leave_id: int, approver_id: int, comments: str | None = None) -> LeaveRequest:
        return self._decide(leave_id, approver_id, LeaveStatus.REJECTED, comments)

    def _decide(self, leave_id: int, approver_id: int, target: LeaveStatus, comments: str | None) -> LeaveRequest:
        req = self.get(leave_id)
        if not self._employees.exists(approver_id):
            raise NotFoundError(f"Approver {approver_id} not found")
        if not can_transition(LEAVE_TRANSITIONS, req.status, target):
            raise StateError(
                f"Leave request {req.leave_id} has already been processed ({req.status.value})",
                current=req.status,
            )

        decided = self._leaves.transition(
            req.leave_id,
            current=req.status,
            target=target,
            response_date=self._today(),
            comments=optional_text(comments),
            approver_id=approver_id,
        )
        if not decided:
            self._raise_lost_race(req.leave_id, "processed")
        log.info("Leave %s: %s -> %s by %s", req.leave_id, req.status.value, target.value, approver_id)
        return self.get(req.leave_id)

    def cancel(self, leave_id: int, reason: str | None = None) -> LeaveRequest:
        req = self.get(leave_id)
        require_transition(LEAVE_TRANSITIONS, req.status, LeaveStatus.CANCELLED, what=f"Leave request {req.leave_id}")

        cancelled = self._leaves.transition(
            req.leave_id,
            current=req.status,
            target=LeaveStatus.CANCELLED,
            response_date=self._today(),
            comments=optional_text(reason),
        )
        if not cancelled:
            self._raise_lost_race(req.leave_id, "cancelled")
        log.info("Leave %s: %s -> %s", req.leave_id, req.status.value, LeaveStatus.CANCELLED.value)
        return self.get(req.leave_id)

    def delete(self, leave_id: int) -> None:
        req = self.get(leave_id)
        self._leaves.soft_delete(req.leave_id, deleted_at=self._clock())
        log.info("Leave %s: deleted", req.leave_id)

    def restore(self, leave_id: int) -> LeaveRequest:
        req = self.get(leave_id, include_deleted=True)
        if not req.is_deleted:
            return req

        if req.is_blocking:
            self._require_no_overlap(req.employee_id, req.start_date, req.end_date, exclude_id=req.leave_id)
        self._leaves.restore(req.leave_id, check_overlap=req.is_blocking)
        log.info("Leave %s: restored", req.leave_id)
        return self.get(req.leave_id)

    # ---- quota reporting ----------------------------------------------

    def days_taken(self, employee_id: int, leave_type: LeaveType, year: int) -> int:
        """Days held by PENDING or APPROVED requests that start in `year`."""

        requests = self._leaves.list_requests(
            employee_id=employee_id,
            statuses=BLOCKING_LEAVE_STATUSES,
            leave_type=leave_type,
            starts_from=date(int(year), 1, 1),
            starts_to=date(int(year), 12, 31),
        )
        return sum(r.total_days for r in requests)

    def remaining_quota(self, employee_id: int, leave_type: LeaveType, year: int) -> int:
        # May go negative: allowances are informational.
        return leave_type.max_days_per_year - self.days_taken(employee_id, leave_type, year)

    def balances(self, employee_id: int, year: int) -> List[LeaveBalance]:
        self._require_employee(employee_id)
        out: List[LeaveBalance] = []
        for leave_type in LeaveType:
            taken = self.days_taken(employee_id, leave_type, year)
            out.append(
                LeaveBalance(
                    leave_type=leave_type,
                    allowance=leave_type.max_days_per_year,
                    taken=taken,
                    remaining=leave_type.max_days_per_year - taken,
                    label=leave_type.label,
                )
            )
        return out

    # ---- read side --------------------------------------------------

    def get(self, leave_id: int, *, include_deleted: bool = False) -> LeaveRequest:
        req = self._leaves.get(int(leave_id), include_deleted=include_deleted)
        if not req:
            raise NotFoundError(f"Leave request {leave_id} not found")
        return req

    def list_for_employee(self, employee_id: int, *, include_deleted: bool = False) -> Sequence[LeaveRequest]:
        return self._leaves.list_requests(employee_id=employee_id, include_deleted=include_deleted)

    def list_by_status(self, status: LeaveStatus) -> Sequence[LeaveRequest]:
        return self._leaves.list_requests(statuses={status})

    def pending(self) -> Sequence[LeaveRequest]:
        """Oldest first, the order an approver works through them."""

        return self._leaves.list_requests(statuses={LeaveStatus.PENDING}, oldest_first=True)

    def pending_older_than(
        self, days: int = DEFAULT_STALE_PENDING_DAYS, *, today: date | None = None
    ) -> Sequence[LeaveRequest]:
        cutoff = (today or self._today()) - timedelta(days=int(days))
        return self._leaves.list_requests(
            statuses={LeaveStatus.PENDING},
            requested_before=cutoff,
            oldest_first=True,
        )

    def overlapping_approved(self, start_date: date, end_date: date) -> Sequence[LeaveRequest]:
        require_date_order(start_date, end_date)
        return self._leaves.list_requests(statuses={LeaveStatus.APPROVED}, overlapping=(start_date, end_date))

    def summary_by_type(self, start_date: date, end_date: date) -> List[LeaveTypeSummary]:
        """Approved requests starting in the window, grouped by leave type."""

        require_date_order(start_date, end_date)
        requests = self._leaves.list_requests(
            statuses={LeaveStatus.APPROVED},
            starts_from=start_date,
            starts_to=end_date,
        )
        summary = []
        for leave_type in LeaveType:
            of_type = [r for r in requests if r.leave_type is leave_type]
            if of_type:
                summary.append(
                    LeaveTypeSummary(
                        leave_type=leave_type,
                        requests=len(of_type),
                        total_days=sum(r.total_days for r in of_type),
                    )
                )
        return summary

    def approved_by(self, approver_id: int) -> Sequence[LeaveRequest]:
        return self._leaves.list_requests(approver_id=approver_id, statuses={LeaveStatus.APPROVED})

    def recent(self, *, limit: int = DEFAULT_RECENT_LIMIT) -> Sequence[LeaveRequest]:
        return self._leaves.list_requests(limit=int(limit))

    # ---- helpers ----------------------------------------------------

    def _require_employee(self, employee_id: int) -> None:
        if not self._employees.exists(employee_id):
            raise NotFoundError(f"Employee {employee_id} not found")

    def _require_no_overlap(
        self, employee_id: int, start_date: date, end_date: date, *, exclude_id: Optional[int] = None
    ) -> None:
        conflicts = self._leaves.find_overlapping(employee_id, start_date, end_date, exclude_id=exclude_id)
        if conflicts:
            raise ConflictError(
                "Leave request overlaps an existing pending or approved request",
                conflicts=conflicts,
            )

    @staticmethod
    def _require_pending(req: LeaveRequest, action: str) -> None:
        if req.status is not LeaveStatus.PENDING:
            raise StateError(
                f"Only pending leave requests can be {action}; request {req.leave_id} is {req.status.value}",
                current=req.status,
            )

    def _raise_lost_race(self, leave_id: int, action: str) -> None:
        current = self.get(leave_id, include_deleted=True)
        raise StateError(
            f"Leave request {leave_id} could not be {action}; it is now {current.status.value}",
            current=current.status,
        )
