from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Attendance status stored per employee-day."""

    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    HALF_DAY = "HALF_DAY"
    OVERTIME = "OVERTIME"
    WORK_FROM_HOME = "WORK_FROM_HOME"

    @property
    def label(self) -> str:
        return _ATTENDANCE_LABELS[self]

    @property
    def is_present(self) -> bool:
        return self is not AttendanceStatus.ABSENT


_ATTENDANCE_LABELS = {
    AttendanceStatus.PRESENT: "Present",
    AttendanceStatus.ABSENT: "Absent",
    AttendanceStatus.LATE: "Late",
    AttendanceStatus.HALF_DAY: "Half Day",
    AttendanceStatus.OVERTIME: "Overtime",
    AttendanceStatus.WORK_FROM_HOME: "Work From Home",
}


class LeaveType(str, Enum):
    """Leave categories, each with an annual allowance in days."""

    ANNUAL = "ANNUAL"
    SICK = "SICK"
    PERSONAL = "PERSONAL"
    MATERNITY = "MATERNITY"
    PATERNITY = "PATERNITY"
    BEREAVEMENT = "BEREAVEMENT"
    EMERGENCY = "EMERGENCY"

    @property
    def label(self) -> str:
        return f"{self.value.capitalize()} Leave"

    @property
    def max_days_per_year(self) -> int:
        return _LEAVE_QUOTAS[self]


_LEAVE_QUOTAS = {
    LeaveType.ANNUAL: 21,
    LeaveType.SICK: 14,
    LeaveType.PERSONAL: 7,
    LeaveType.MATERNITY: 90,
    LeaveType.PATERNITY: 14,
    LeaveType.BEREAVEMENT: 5,
    LeaveType.EMERGENCY: 3,
}


class LeaveStatus(str, Enum):
    """Leave request lifecycle."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"

    @property
    def is_blocking(self) -> bool:
        return self in BLOCKING_LEAVE_STATUSES


BLOCKING_LEAVE_STATUSES = frozenset({LeaveStatus.PENDING, LeaveStatus.APPROVED})


class PayrollStatus(str, Enum):
    """Payroll record lifecycle."""

    DRAFT = "DRAFT"
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_PAYROLL_STATUSES


TERMINAL_PAYROLL_STATUSES = frozenset({PayrollStatus.COMPLETED, PayrollStatus.REJECTED, PayrollStatus.FAILED})

# Completed pay has left the building; processing pay is in flight.
UNDELETABLE_PAYROLL_STATUSES = frozenset({PayrollStatus.COMPLETED, PayrollStatus.PROCESSING})
