from __future__ import annotations

from datetime import date, datetime, time, timezone
from decimal import Decimal

import pytest

from src.hr_workflow.hr_workflow.common.datetime_utils import (
    inclusive_days,
    month_bounds,
    parse_hhmm,
    parse_iso_date,
    parse_iso_datetime,
    ranges_overlap,
)
from src.hr_workflow.hr_workflow.common.validators import MAX_MONEY, parse_enum, require_positive_id, to_money
from src.hr_workflow.hr_workflow.core.enums import LeaveStatus, LeaveType, PayrollStatus
from src.hr_workflow.hr_workflow.core.exceptions import StateError, ValidationError
from src.hr_workflow.hr_workflow.core.transitions import (
    LEAVE_TRANSITIONS,
    PAYROLL_TRANSITIONS,
    can_transition,
    require_transition,
)


def test_to_money_rounds_half_up():
    assert to_money("10.005", "Salary") == Decimal("10.01")
    assert to_money(3, "Salary") == Decimal("3.00")


def test_to_money_rejects_negative_unless_allowed():
    with pytest.raises(ValidationError):
        to_money("-1", "Bonus")
    assert to_money("-1", "Net pay", allow_negative=True) == Decimal("-1.00")


@pytest.mark.parametrize("value", [None, "", "abc"])
def test_to_money_rejects_missing_or_garbage(value):
    with pytest.raises(ValidationError):
        to_money(value, "Salary")


@pytest.mark.parametrize("value", ["NaN", "sNaN", "Infinity", "-Infinity", float("nan")])
def test_to_money_rejects_non_finite(value):
    with pytest.raises(ValidationError):
        to_money(value, "Salary", allow_negative=True)


def test_to_money_is_bounded_by_column_size():
    assert to_money("9999999999999.99", "Salary") == MAX_MONEY
    with pytest.raises(ValidationError):
        to_money("1e15", "Salary")
    with pytest.raises(ValidationError):
        to_money("-10000000000000", "Net pay", allow_negative=True)


@pytest.mark.parametrize("value", [0, -3, "x", None])
def test_require_positive_id(value):
    with pytest.raises(ValidationError):
        require_positive_id(value, "employee_id")


def test_parse_enum_is_case_insensitive():
    assert parse_enum(LeaveType, " sick ", "leave_type") is LeaveType.SICK
    assert parse_enum(LeaveType, LeaveType.ANNUAL, "leave_type") is LeaveType.ANNUAL


def test_parse_enum_lists_allowed_values():
    with pytest.raises(ValidationError) as exc:
        parse_enum(LeaveStatus, "done", "status")

    assert "PENDING" in str(exc.value)


def test_date_parsing():
    assert parse_iso_date("2026-02-28") == date(2026, 2, 28)
    assert parse_iso_datetime("2026-02-28T09:15").minute == 15
    assert parse_hhmm("08:30") == time(8, 30)
    with pytest.raises(ValidationError):
        parse_iso_date("28/02/2026")


def test_offset_timestamps_become_naive_local_time():
    parsed = parse_iso_datetime("2026-03-02T08:30:00+07:00")

    assert parsed.tzinfo is None
    assert parsed == datetime(2026, 3, 2, 1, 30, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)


def test_inclusive_days_and_month_bounds():
    assert inclusive_days(date(2026, 4, 6), date(2026, 4, 6)) == 1
    assert month_bounds(2028, 2) == (date(2028, 2, 1), date(2028, 2, 29))
    with pytest.raises(ValidationError):
        month_bounds(2026, 13)


def test_ranges_overlap_is_inclusive():
    assert ranges_overlap(date(2026, 4, 1), date(2026, 4, 5), date(2026, 4, 5), date(2026, 4, 9))
    assert not ranges_overlap(date(2026, 4, 1), date(2026, 4, 4), date(2026, 4, 5), date(2026, 4, 9))


def test_leave_requests_are_decided_once():
    for status in (LeaveStatus.APPROVED, LeaveStatus.REJECTED, LeaveStatus.CANCELLED):
        assert LEAVE_TRANSITIONS[status] == frozenset()
        assert can_transition(LEAVE_TRANSITIONS, LeaveStatus.PENDING, status)


def test_payroll_terminal_states_have_no_exits():
    for status in PayrollStatus:
        if status.is_terminal:
            assert PAYROLL_TRANSITIONS[status] == frozenset()


def test_only_pending_payroll_can_be_approved():
    sources = {s for s in PayrollStatus if can_transition(PAYROLL_TRANSITIONS, s, PayrollStatus.APPROVED)}

    assert sources == {PayrollStatus.PENDING}


def test_require_transition_reports_current_state():
    with pytest.raises(StateError) as exc:
        require_transition(PAYROLL_TRANSITIONS, PayrollStatus.DRAFT, PayrollStatus.COMPLETED, what="Payroll 1")

    assert exc.value.current is PayrollStatus.DRAFT
    assert "DRAFT" in str(exc.value)
