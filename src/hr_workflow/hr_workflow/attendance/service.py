from __future__ import annotations

import logging
from datetime import date, datetime, time
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict, Optional, Sequence

from ..common.datetime_utils import month_bounds, now_local
from ..common.validators import CENTS, optional_text, require_date_order
from ..core.constants import DEFAULT_LATE_GRACE_MINUTES, DEFAULT_RECENT_LIMIT, DEFAULT_WORKDAY_START
from ..core.enums import AttendanceStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..employees.repository import EmployeeDirectory
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, AttendanceUpdate, MonthlySummary
from .repository import AttendanceRepository
from .strategies.base import WorkdayPolicy

log = logging.getLogger(__name__)


class AttendanceService:
    """Clock ledger: one record per employee-day, opened by clock-in and closed by clock-out."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeDirectory,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        workday_start: time = DEFAULT_WORKDAY_START,
        grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._employees = employees
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._policy = WorkdayPolicy(start=workday_start, grace_minutes=int(grace_minutes))
        self._clock = clock

    @property
    def policy(self) -> WorkdayPolicy:
        return self._policy

    # ---- write side -------------------------------------------------

    def clock_in(self, employee_id: int, *, now: datetime | None = None, note: str | None = None) -> AttendanceRecord:
        now = now or self._clock()
        today = now.date()

        self._require_employee(employee_id)
        self._require_free_day(employee_id, today)

        decision = self._factory.decide(clock_in=now, policy=self._policy)
        attendance_id = self._attendance.create(
            employee_id=employee_id,
            work_date=today,
            clock_in=now,
            clock_out=None,
            status=decision.status,
            note=optional_text(note) or decision.note,
        )
        log.info("Attendance %s: employee %s clocked in (%s)", attendance_id, employee_id, decision.status.value)
        return self.get(attendance_id)

    def clock_out(self, employee_id: int, *, now: datetime | None = None, note: str | None = None) -> AttendanceRecord:
        now = now or self._clock()
        record = self._attendance.get_for_employee_and_date(employee_id, now.date())
        if not record:
            raise NotFoundError(f"No attendance record for employee {employee_id} on {now.date().isoformat()}")
        return self._close(record, now=now, note=note)

    def clock_out_record(
        self, attendance_id: int, *, now: datetime | None = None, note: str | None = None
    ) -> AttendanceRecord:
        now = now or self._clock()
        return self._close(self.get(attendance_id), now=now, note=note)

    def _close(self, record: AttendanceRecord, *, now: datetime, note: str | None) -> AttendanceRecord:
        if record.clock_out is not None:
            raise ConflictError("Employee has already clocked out for this record")
        if record.clock_in is None:
            raise ValidationError("Cannot clock out a record without a clock-in")
        if now < record.clock_in:
            raise ValidationError("Clock-out cannot be before clock-in")

        # Conditional write: a concurrent clock-out wins and we report the conflict.
        if not self._attendance.set_clock_out(attendance_id=record.attendance_id, clock_out=now, note=optional_text(note)):
            raise ConflictError("Employee has already clocked out for this record")

        log.info("Attendance %s: employee %s clocked out", record.attendance_id, record.employee_id)
        return self.get(record.attendance_id)

    def record_attendance(
        self,
        employee_id: int,
        work_date: date,
        *,
        clock_in: datetime | None = None,
        clock_out: datetime | None = None,
        status: AttendanceStatus | None = None,
        note: str | None = None,
    ) -> AttendanceRecord:
        """Administrative entry for a day that was not clocked through the normal flow."""

        self._require_employee(employee_id)
        self._check_times(clock_in, clock_out)
        self._require_free_day(employee_id, work_date)

        if status is None:
            status = self._factory.decide(clock_in=clock_in, policy=self._policy).status

        attendance_id = self._attendance.create(
            employee_id=employee_id,
            work_date=work_date,
            clock_in=clock_in,
            clock_out=clock_out,
            status=status,
            note=optional_text(note),
        )
        log.info("Attendance %s: recorded %s for employee %s on %s", attendance_id, status.value, employee_id, work_date)
        return self.get(attendance_id)

    def edit_attendance(self, attendance_id: int, changes: AttendanceUpdate) -> AttendanceRecord:
        record = self.get(attendance_id)

        employee_id = changes.employee_id if changes.employee_id is not None else record.employee_id
        work_date = changes.work_date if changes.work_date is not None else record.work_date
        clock_in = changes.clock_in if changes.clock_in is not None else record.clock_in
        if changes.clear_clock_out:
            clock_out = None
        else:
            clock_out = changes.clock_out if changes.clock_out is not None else record.clock_out

        self._check_times(clock_in, clock_out)

        if employee_id != record.employee_id:
            self._require_employee(employee_id)
        if employee_id != record.employee_id or work_date != record.work_date:
            self._require_free_day(employee_id, work_date, exclude_id=record.attendance_id)

        fields: Dict[str, object] = {}
        if employee_id != record.employee_id:
            fields["employee_id"] = employee_id
        if work_date != record.work_date:
            fields["work_date"] = work_date
        if clock_in != record.clock_in:
            fields["clock_in"] = clock_in
        if clock_out != record.clock_out:
            fields["clock_out"] = clock_out
        if changes.status is not None and changes.status != record.status:
            fields["status"] = changes.status
        if changes.note is not None:
            fields["note"] = optional_text(changes.note)

        if fields:
            self._attendance.update_fields(record.attendance_id, fields)
            log.info("Attendance %s: edited %s", record.attendance_id, ", ".join(sorted(fields)))
        return self.get(record.attendance_id)

    def delete_attendance(self, attendance_id: int) -> None:
        record = self.get(attendance_id)
        self._attendance.soft_delete(record.attendance_id, deleted_at=self._clock())
        log.info("Attendance %s: deleted", record.attendance_id)

    def restore_attendance(self, attendance_id: int) -> AttendanceRecord:
        record = self.get(attendance_id, include_deleted=True)
        if not record.is_deleted:
            return record

        self._require_free_day(record.employee_id, record.work_date, exclude_id=record.attendance_id)
        self._attendance.restore(record.attendance_id)
        log.info("Attendance %s: restored", record.attendance_id)
        return self.get(record.attendance_id)

    def purge_attendance(self, attendance_id: int) -> None:
        if not self._attendance.purge(int(attendance_id)):
            raise NotFoundError(f"Attendance record {attendance_id} not found")
        log.info("Attendance %s: purged", attendance_id)

    # ---- read side --------------------------------------------------

    def get(self, attendance_id: int, *, include_deleted: bool = False) -> AttendanceRecord:
        record = self._attendance.get(int(attendance_id), include_deleted=include_deleted)
        if not record:
            raise NotFoundError(f"Attendance record {attendance_id} not found")
        return record

    def list_for_employee(
        self,
        employee_id: int,
        *,
        start_date: date | None = None,
        end_date: date | None = None,
        include_deleted: bool = False,
    ) -> Sequence[AttendanceRecord]:
        if start_date and end_date:
            require_date_order(start_date, end_date)
        return self._attendance.list_records(
            employee_id=employee_id,
            start_date=start_date,
            end_date=end_date,
            include_deleted=include_deleted,
        )

    def list_by_date(self, work_date: date) -> Sequence[AttendanceRecord]:
        return self._attendance.list_records(start_date=work_date, end_date=work_date)

    def list_by_status(
        self, status: AttendanceStatus, *, start_date: date | None = None, end_date: date | None = None
    ) -> Sequence[AttendanceRecord]:
        if start_date and end_date:
            require_date_order(start_date, end_date)
        return self._attendance.list_records(status=status, start_date=start_date, end_date=end_date)

    def late_arrivals(self, *, start_date: date | None = None, end_date: date | None = None):
        return self.list_by_status(AttendanceStatus.LATE, start_date=start_date, end_date=end_date)

    def overtime(self, *, start_date: date | None = None, end_date: date | None = None):
        return self.list_by_status(AttendanceStatus.OVERTIME, start_date=start_date, end_date=end_date)

    def work_from_home(self, *, start_date: date | None = None, end_date: date | None = None):
        return self.list_by_status(AttendanceStatus.WORK_FROM_HOME, start_date=start_date, end_date=end_date)

    def needing_clock_out(self, *, work_date: date | None = None) -> Sequence[AttendanceRecord]:
        """Open days: clocked in but never clocked out."""

        return self._attendance.list_records(start_date=work_date, end_date=work_date, open_only=True)

    def recent(self, *, limit: int = DEFAULT_RECENT_LIMIT) -> Sequence[AttendanceRecord]:
        return self._attendance.list_records(limit=int(limit))

    def monthly_summary(self, employee_id: int, year: int, month: int) -> MonthlySummary:
        name = self._employees.get_name(employee_id)
        if name is None:
            raise NotFoundError(f"Employee {employee_id} not found")
        start, end = month_bounds(year, month)
        records = self._attendance.list_records(employee_id=employee_id, start_date=start, end_date=end)

        by_status = {s.value: 0 for s in AttendanceStatus}
        for r in records:
            by_status[r.status.value] += 1

        return MonthlySummary(
            employee_id=employee_id,
            year=int(year),
            month=int(month),
            days_recorded=len(records),
            present_days=sum(1 for r in records if r.status.is_present),
            absent_days=by_status[AttendanceStatus.ABSENT.value],
            total_hours=_hours(sum(r.worked_minutes for r in records)),
            by_status=by_status,
            employee_name=name,
        )

    def status_summary(self, start_date: date, end_date: date) -> Dict[str, int]:
        require_date_order(start_date, end_date)
        counts = {s.value: 0 for s in AttendanceStatus}
        for r in self._attendance.list_records(start_date=start_date, end_date=end_date):
            counts[r.status.value] += 1
        return counts

    def total_hours(self, employee_id: int, start_date: date, end_date: date) -> Decimal:
        require_date_order(start_date, end_date)
        records = self._attendance.list_records(employee_id=employee_id, start_date=start_date, end_date=end_date)
        return _hours(sum(r.worked_minutes for r in records))

    # ---- helpers ----------------------------------------------------

    def _require_employee(self, employee_id: int) -> None:
        if not self._employees.exists(employee_id):
            raise NotFoundError(f"Employee {employee_id} not found")

    def _require_free_day(self, employee_id: int, work_date: date, *, exclude_id: Optional[int] = None) -> None:
        existing = self._attendance.get_for_employee_and_date(employee_id, work_date)
        if existing and existing.attendance_id != exclude_id:
            raise ConflictError(
                f"Attendance already recorded for employee {employee_id} on {work_date.isoformat()}",
                conflicts=[existing],
            )

    @staticmethod
    def _check_times(clock_in: Optional[datetime], clock_out: Optional[datetime]) -> None:
        if clock_out is None:
            return
        if clock_in is None:
            raise ValidationError("Clock-out requires a clock-in")
        if clock_out < clock_in:
            raise ValidationError("Clock-out cannot be before clock-in")


def _hours(minutes: int) -> Decimal:
    return (Decimal(minutes) / Decimal(60)).quantize(CENTS, rounding=ROUND_HALF_UP)
