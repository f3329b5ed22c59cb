from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get(self, attendance_id: int, *, include_deleted: bool = False) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        """Active record for the employee-day, if any."""

        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: int,
        work_date: date,
        clock_in: Optional[datetime],
        clock_out: Optional[datetime],
        status: AttendanceStatus,
        note: Optional[str] = None,
    ) -> int:
        """Insert an active record; raises ConflictError if the employee-day is taken."""

        raise NotImplementedError

    def set_clock_out(self, *, attendance_id: int, clock_out: datetime, note: Optional[str] = None) -> bool:
        """Set clock-out only if it is still empty; False when another writer got there first."""

        raise NotImplementedError

    def update_fields(self, attendance_id: int, fields: Dict[str, Any]) -> bool:
        raise NotImplementedError

    def soft_delete(self, attendance_id: int, *, deleted_at: datetime) -> bool:
        raise NotImplementedError

    def restore(self, attendance_id: int) -> bool:
        raise NotImplementedError

    def purge(self, attendance_id: int) -> bool:
        raise NotImplementedError

    def list_records(
        self,
        *,
        employee_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[AttendanceStatus] = None,
        open_only: bool = False,
        include_deleted: bool = False,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records ordered by work_date DESC, newest first."""

        raise NotImplementedError
