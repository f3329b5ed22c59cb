from __future__ import annotations

from datetime import date

import pytest

from src.hr_workflow.hr_workflow.core.enums import LeaveStatus, LeaveType
from src.hr_workflow.hr_workflow.core.exceptions import ConflictError, NotFoundError, StateError, ValidationError
from src.hr_workflow.hr_workflow.leave.model import LeaveUpdate


def make(service, employee_id=1, start=date(2026, 4, 6), end=date(2026, 4, 10), leave_type=LeaveType.ANNUAL):
    return service.create(employee_id, leave_type, start, end, "Family trip")


def test_create_counts_inclusive_days(leave_service, fixed_now):
    req = make(leave_service)

    assert req.status is LeaveStatus.PENDING
    assert req.total_days == 5
    assert req.request_date == fixed_now.date()
    assert req.approver_id is None


def test_single_day_leave_is_one_day(leave_service):
    req = make(leave_service, start=date(2026, 4, 6), end=date(2026, 4, 6))

    assert req.total_days == 1


def test_create_rejects_reversed_dates(leave_service):
    with pytest.raises(ValidationError):
        make(leave_service, start=date(2026, 4, 10), end=date(2026, 4, 6))


def test_create_unknown_employee(leave_service):
    with pytest.raises(NotFoundError):
        make(leave_service, employee_id=99)


def test_reason_is_optional(leave_service):
    req = leave_service.create(2, LeaveType.SICK, date(2026, 4, 1), date(2026, 4, 1))

    assert req.reason is None


def test_overlap_with_pending_conflicts_and_lists_conflicts(leave_service):
    first = make(leave_service)

    with pytest.raises(ConflictError) as exc:
        make(leave_service, start=date(2026, 4, 10), end=date(2026, 4, 14))

    assert [r.leave_id for r in exc.value.conflicts] == [first.leave_id]


def test_adjacent_ranges_do_not_overlap(leave_service):
    make(leave_service)

    req = make(leave_service, start=date(2026, 4, 11), end=date(2026, 4, 12))

    assert req.status is LeaveStatus.PENDING


def test_other_employee_may_overlap(leave_service):
    make(leave_service)

    assert make(leave_service, employee_id=2).employee_id == 2


def test_rejected_or_cancelled_requests_do_not_block(leave_service):
    rejected = make(leave_service)
    leave_service.reject(rejected.leave_id, approver_id=3)
    cancelled = make(leave_service)
    leave_service.cancel(cancelled.leave_id)

    assert make(leave_service).status is LeaveStatus.PENDING


def test_approve_sets_decision_fields(leave_service, fixed_now):
    req = make(leave_service)

    approved = leave_service.approve(req.leave_id, approver_id=3, comments="Enjoy")

    assert approved.status is LeaveStatus.APPROVED
    assert approved.approver_id == 3
    assert approved.response_date == fixed_now.date()
    assert approved.comments == "Enjoy"


def test_reject_sets_decision_fields(leave_service):
    req = make(leave_service)

    rejected = leave_service.reject(req.leave_id, approver_id=3, comments="Release week")

    assert rejected.status is LeaveStatus.REJECTED
    assert rejected.comments == "Release week"


@pytest.mark.parametrize("decide", ["approve", "reject"])
def test_decided_request_cannot_be_decided_again(leave_service, decide):
    req = make(leave_service)
    leave_service.approve(req.leave_id, approver_id=3)

    with pytest.raises(StateError) as exc:
        getattr(leave_service, decide)(req.leave_id, approver_id=3)

    assert "already been processed" in str(exc.value)
    assert exc.value.current is LeaveStatus.APPROVED


def test_approve_unknown_approver(leave_service):
    req = make(leave_service)

    with pytest.raises(NotFoundError):
        leave_service.approve(req.leave_id, approver_id=77)


def test_approve_missing_request(leave_service):
    with pytest.raises(NotFoundError):
        leave_service.approve(404, approver_id=3)


def test_cancel_pending_records_reason(leave_service):
    req = make(leave_service)

    cancelled = leave_service.cancel(req.leave_id, reason="Plans changed")

    assert cancelled.status is LeaveStatus.CANCELLED
    assert cancelled.comments == "Plans changed"
    assert cancelled.response_date is not None


def test_cancel_approved_is_refused(leave_service):
    req = make(leave_service)
    leave_service.approve(req.leave_id, approver_id=3)

    with pytest.raises(StateError):
        leave_service.cancel(req.leave_id)


def test_update_recomputes_days(leave_service):
    req = make(leave_service)

    updated = leave_service.update(req.leave_id, LeaveUpdate(end_date=date(2026, 4, 7), reason="Shorter trip"))

    assert updated.total_days == 2
    assert updated.reason == "Shorter trip"


def test_update_does_not_conflict_with_itself(leave_service):
    req = make(leave_service)

    updated = leave_service.update(req.leave_id, LeaveUpdate(start_date=date(2026, 4, 7)))

    assert updated.total_days == 4


def test_update_into_other_request_conflicts(leave_service):
    make(leave_service)
    other = make(leave_service, start=date(2026, 5, 4), end=date(2026, 5, 5))

    with pytest.raises(ConflictError):
        leave_service.update(other.leave_id, LeaveUpdate(start_date=date(2026, 4, 9), end_date=date(2026, 4, 9)))


def test_update_only_while_pending(leave_service):
    req = make(leave_service)
    leave_service.reject(req.leave_id, approver_id=3)

    with pytest.raises(StateError):
        leave_service.update(req.leave_id, LeaveUpdate(reason="Please reconsider"))


def test_update_rejects_reversed_dates(leave_service):
    req = make(leave_service)

    with pytest.raises(ValidationError):
        leave_service.update(req.leave_id, LeaveUpdate(end_date=date(2026, 4, 1)))


def test_delete_keeps_status_and_frees_range(leave_service):
    req = make(leave_service)
    leave_service.approve(req.leave_id, approver_id=3)

    leave_service.delete(req.leave_id)

    assert leave_service.get(req.leave_id, include_deleted=True).status is LeaveStatus.APPROVED
    assert make(leave_service).status is LeaveStatus.PENDING


def test_restore_blocking_request_into_overlap_conflicts(leave_service):
    req = make(leave_service)
    leave_service.delete(req.leave_id)
    make(leave_service)

    with pytest.raises(ConflictError):
        leave_service.restore(req.leave_id)


def test_restore_non_blocking_request_ignores_overlap(leave_service):
    req = make(leave_service)
    leave_service.reject(req.leave_id, approver_id=3)
    leave_service.delete(req.leave_id)
    make(leave_service)

    restored = leave_service.restore(req.leave_id)

    assert not restored.is_deleted


def test_quota_counts_pending_and_approved_in_year(leave_service):
    approved = make(leave_service)
    leave_service.approve(approved.leave_id, approver_id=3)
    make(leave_service, start=date(2026, 6, 1), end=date(2026, 6, 3))
    rejected = make(leave_service, start=date(2026, 7, 1), end=date(2026, 7, 10))
    leave_service.reject(rejected.leave_id, approver_id=3)
    make(leave_service, start=date(2027, 1, 4), end=date(2027, 1, 5))

    assert leave_service.days_taken(1, LeaveType.ANNUAL, 2026) == 8
    assert leave_service.remaining_quota(1, LeaveType.ANNUAL, 2026) == 13


def test_quota_is_not_enforced(leave_service):
    req = make(leave_service, leave_type=LeaveType.EMERGENCY, start=date(2026, 4, 1), end=date(2026, 4, 5))

    assert req.status is LeaveStatus.PENDING
    assert leave_service.remaining_quota(1, LeaveType.EMERGENCY, 2026) == -2


def test_balances_cover_every_type(leave_service):
    make(leave_service, leave_type=LeaveType.SICK, start=date(2026, 2, 2), end=date(2026, 2, 3))

    balances = {b.leave_type: b for b in leave_service.balances(1, 2026)}

    assert set(balances) == set(LeaveType)
    assert balances[LeaveType.SICK].taken == 2
    assert balances[LeaveType.SICK].remaining == 12
    assert balances[LeaveType.MATERNITY].allowance == 90


def test_pending_older_than(leave_service):
    old = leave_service.create(1, LeaveType.ANNUAL, date(2026, 4, 6), date(2026, 4, 7), today=date(2026, 2, 1))
    leave_service.create(2, LeaveType.ANNUAL, date(2026, 4, 6), date(2026, 4, 7), today=date(2026, 2, 28))

    stale = leave_service.pending_older_than(7, today=date(2026, 3, 2))

    assert [r.leave_id for r in stale] == [old.leave_id]


def test_pending_lists_oldest_first(leave_service):
    a = leave_service.create(1, LeaveType.ANNUAL, date(2026, 4, 6), date(2026, 4, 7), today=date(2026, 2, 20))
    b = leave_service.create(2, LeaveType.ANNUAL, date(2026, 4, 6), date(2026, 4, 7), today=date(2026, 2, 10))

    assert [r.leave_id for r in leave_service.pending()] == [b.leave_id, a.leave_id]


def test_overlapping_approved_and_approved_by(leave_service):
    a = make(leave_service, employee_id=1)
    b = make(leave_service, employee_id=2, start=date(2026, 4, 9), end=date(2026, 4, 20))
    make(leave_service, employee_id=3)
    leave_service.approve(a.leave_id, approver_id=3)
    leave_service.approve(b.leave_id, approver_id=1)

    window = leave_service.overlapping_approved(date(2026, 4, 10), date(2026, 4, 11))

    assert {r.leave_id for r in window} == {a.leave_id, b.leave_id}
    assert [r.leave_id for r in leave_service.approved_by(3)] == [a.leave_id]


def test_summary_by_type_counts_approved_only(leave_service):
    a = make(leave_service, employee_id=1)
    b = make(leave_service, employee_id=2, leave_type=LeaveType.SICK, start=date(2026, 4, 1), end=date(2026, 4, 2))
    make(leave_service, employee_id=3)
    leave_service.approve(a.leave_id, approver_id=3)
    leave_service.approve(b.leave_id, approver_id=3)

    summary = {s.leave_type: s for s in leave_service.summary_by_type(date(2026, 4, 1), date(2026, 4, 30))}

    assert summary[LeaveType.ANNUAL].requests == 1
    assert summary[LeaveType.ANNUAL].total_days == 5
    assert summary[LeaveType.SICK].total_days == 2
