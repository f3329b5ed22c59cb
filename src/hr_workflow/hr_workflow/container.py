from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import parse_hhmm
from .core.constants import DEFAULT_LATE_GRACE_MINUTES, DEFAULT_PAYROLL_OVERDUE_DAYS
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_directory import MySQLEmployeeDirectory
from .employees.repository import EmployeeDirectory
from .leave.mysql_leave_repository import MySQLLeaveRepository
from .leave.repository import LeaveRepository
from .leave.service import LeaveService
from .payroll.calculator.standard_calculator import StandardNetPayCalculator
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.repository import PayrollRepository
from .payroll.service import PayrollService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    employees: EmployeeDirectory
    attendance_repo: AttendanceRepository
    leave_repo: LeaveRepository
    payroll_repo: PayrollRepository

    attendance_service: AttendanceService
    leave_service: LeaveService
    payroll_service: PayrollService


def build_services(
    *,
    employees: EmployeeDirectory,
    attendance_repo: AttendanceRepository,
    leave_repo: LeaveRepository,
    payroll_repo: PayrollRepository,
    settings: Any = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services over the given repositories using workflow settings (if any)."""

    workday_start = parse_hhmm(getattr(settings, "WORKDAY_START", "09:00"))
    grace_minutes = int(getattr(settings, "LATE_GRACE_MINUTES", DEFAULT_LATE_GRACE_MINUTES))
    overdue_days = int(getattr(settings, "PAYROLL_OVERDUE_DAYS", DEFAULT_PAYROLL_OVERDUE_DAYS))

    attendance_service = AttendanceService(
        attendance_repo,
        employees,
        strategy_factory=AttendanceStrategyFactory(),
        workday_start=workday_start,
        grace_minutes=grace_minutes,
    )
    leave_service = LeaveService(leave_repo, employees)
    payroll_service = PayrollService(
        payroll_repo,
        employees,
        calculator=StandardNetPayCalculator(),
        overdue_days=overdue_days,
    )

    return Container(
        conn=conn,
        employees=employees,
        attendance_repo=attendance_repo,
        leave_repo=leave_repo,
        payroll_repo=payroll_repo,
        attendance_service=attendance_service,
        leave_service=leave_service,
        payroll_service=payroll_service,
    )


def build_container(*, db_config: dict, settings: Any = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return build_services(
        employees=MySQLEmployeeDirectory(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        leave_repo=MySQLLeaveRepository(conn),
        payroll_repo=MySQLPayrollRepository(conn),
        settings=settings,
        conn=conn,
    )
