"""Example: drive the workflow through the service layer (no Flask).

Controllers are thin; the rules live in the services built by the container.
"""

import importlib
from datetime import date

from config import get_settings_module

from src.hr_workflow.hr_workflow.container import build_container
from src.hr_workflow.hr_workflow.core.enums import LeaveType


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, settings=settings)

    record = container.attendance_service.clock_in(2)
    print("clocked in:", record.status.value, record.clock_in)

    leave = container.leave_service.create(2, LeaveType.ANNUAL, date(2026, 12, 21), date(2026, 12, 24), "Holidays")
    container.leave_service.approve(leave.leave_id, approver_id=1, comments="Enjoy")

    for balance in container.leave_service.balances(2, 2026):
        print(f"{balance.leave_type.label:<18} {balance.taken:>3}/{balance.allowance}")

    payroll = container.payroll_service.create(2, date(2026, 12, 1), date(2026, 12, 31), "5000.00", bonus="250.00")
    print("payroll net:", payroll.net_pay)


if __name__ == "__main__":
    main()
