from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance record per employee-day."""

    attendance_id: int
    employee_id: int
    work_date: date
    clock_in: Optional[datetime]
    clock_out: Optional[datetime]
    status: AttendanceStatus
    note: Optional[str] = None
    deleted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_open(self) -> bool:
        return self.clock_in is not None and self.clock_out is None

    @property
    def worked_minutes(self) -> int:
        if not self.clock_in or not self.clock_out:
            return 0
        return max(int((self.clock_out - self.clock_in).total_seconds() // 60), 0)

    @property
    def worked_hours(self) -> Decimal:
        return (Decimal(self.worked_minutes) / Decimal(60)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "employee_id": self.employee_id,
            "work_date": self.work_date,
            "clock_in": self.clock_in,
            "clock_out": self.clock_out,
            "status": self.status,
            "status_label": self.status.label,
            "note": self.note,
            "worked_hours": self.worked_hours,
            "deleted": self.is_deleted,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass(frozen=True)
class AttendanceUpdate:
    """Partial edit; fields left as None are not touched.

    `clear_clock_out` distinguishes "leave clock-out alone" from "reopen the day".
    """

    employee_id: Optional[int] = None
    work_date: Optional[date] = None
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    clear_clock_out: bool = False
    status: Optional[AttendanceStatus] = None
    note: Optional[str] = None


@dataclass(frozen=True)
class MonthlySummary:
    """Read model: one employee's month at a glance."""

    employee_id: int
    year: int
    month: int
    days_recorded: int
    present_days: int
    absent_days: int
    total_hours: Decimal
    by_status: dict = field(default_factory=dict)
    employee_name: Optional[str] = None
