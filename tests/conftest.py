from __future__ import annotations

from datetime import datetime

import pytest

from src.hr_workflow.hr_workflow.attendance.service import AttendanceService
from src.hr_workflow.hr_workflow.container import build_services
from src.hr_workflow.hr_workflow.employees.model import Employee
from src.hr_workflow.hr_workflow.leave.service import LeaveService
from src.hr_workflow.hr_workflow.main import create_app
from src.hr_workflow.hr_workflow.payroll.service import PayrollService
from tests.fakes import (
    FakeEmployeeDirectory,
    InMemoryAttendanceRepository,
    InMemoryLeaveRepository,
    InMemoryPayrollRepository,
)

# Monday morning, before the workday starts.
FIXED_NOW = datetime(2026, 3, 2, 8, 30, 0)


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def clock(fixed_now):
    return lambda: fixed_now


@pytest.fixture
def employees():
    return FakeEmployeeDirectory(
        [
            Employee(employee_id=1, full_name="Alice Nguyen", department_name="Human Resources"),
            Employee(employee_id=2, full_name="Bao Tran", department_name="Engineering"),
            Employee(employee_id=3, full_name="Chi Le", department_name="Engineering"),
        ]
    )


@pytest.fixture
def attendance_repo():
    return InMemoryAttendanceRepository()


@pytest.fixture
def leave_repo():
    return InMemoryLeaveRepository()


@pytest.fixture
def payroll_repo():
    return InMemoryPayrollRepository()


@pytest.fixture
def attendance_service(attendance_repo, employees, clock):
    return AttendanceService(attendance_repo, employees, clock=clock)


@pytest.fixture
def leave_service(leave_repo, employees, clock):
    return LeaveService(leave_repo, employees, clock=clock)


@pytest.fixture
def payroll_service(payroll_repo, employees, clock):
    return PayrollService(payroll_repo, employees, clock=clock)


@pytest.fixture
def app(monkeypatch, employees, attendance_repo, leave_repo, payroll_repo):
    monkeypatch.setenv("APP_ENV", "testing")
    container = build_services(
        employees=employees,
        attendance_repo=attendance_repo,
        leave_repo=leave_repo,
        payroll_repo=payroll_repo,
    )
    return create_app(container=container)


@pytest.fixture
def client(app):
    return app.test_client()
