from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import ranges_overlap
from ..core.enums import LeaveStatus, LeaveType


@dataclass(frozen=True)
class LeaveRequest:
    leave_id: int
    employee_id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    total_days: int
    reason: Optional[str]
    status: LeaveStatus
    request_date: date
    approver_id: Optional[int] = None
    response_date: Optional[date] = None
    comments: Optional[str] = None
    deleted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_blocking(self) -> bool:
        return self.status.is_blocking

    def overlaps(self, start: date, end: date) -> bool:
        return ranges_overlap(self.start_date, self.end_date, start, end)


@dataclass(frozen=True)
class LeaveUpdate:
    """Partial edit of a pending request; None means unchanged."""

    employee_id: Optional[int] = None
    leave_type: Optional[LeaveType] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class LeaveBalance:
    leave_type: LeaveType
    allowance: int
    taken: int
    remaining: int
    label: str = ""


@dataclass(frozen=True)
class LeaveTypeSummary:
    leave_type: LeaveType
    requests: int
    total_days: int
