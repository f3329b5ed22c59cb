from __future__ import annotations

import logging

from flask import Flask

from ..common.datetime_utils import parse_iso_date, parse_iso_datetime
from ..common.http import bool_arg, date_arg, int_arg, int_field, json_body, ok
from ..common.validators import parse_enum
from ..core.constants import DEFAULT_RECENT_LIMIT
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from .model import AttendanceUpdate

log = logging.getLogger(__name__)


def _optional_dt(data: dict, key: str):
    value = data.get(key)
    return parse_iso_datetime(value) if value else None


def _records(rows):
    return [r.to_dict() for r in rows]


def register(app: Flask, container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance/clock-in", methods=["POST"], endpoint="attendance_clock_in")
    def clock_in():
        data = json_body()
        record = service.clock_in(
            int_field(data, "employee_id"),
            now=_optional_dt(data, "timestamp"),
            note=data.get("note"),
        )
        return ok(record.to_dict(), status=201)

    @app.route("/api/attendance/clock-out", methods=["POST"], endpoint="attendance_clock_out")
    def clock_out():
        data = json_body()
        record = service.clock_out(
            int_field(data, "employee_id"),
            now=_optional_dt(data, "timestamp"),
            note=data.get("note"),
        )
        return ok(record.to_dict())

    @app.route("/api/attendance/<int:attendance_id>/clock-out", methods=["POST"], endpoint="attendance_clock_out_record")
    def clock_out_record(attendance_id: int):
        data = json_body()
        record = service.clock_out_record(attendance_id, now=_optional_dt(data, "timestamp"), note=data.get("note"))
        return ok(record.to_dict())

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_record")
    def record_attendance():
        data = json_body()
        if not data.get("work_date"):
            raise ValidationError("work_date is required")
        status = parse_enum(AttendanceStatus, data["status"], "status") if data.get("status") else None
        record = service.record_attendance(
            int_field(data, "employee_id"),
            parse_iso_date(data["work_date"]),
            clock_in=_optional_dt(data, "clock_in"),
            clock_out=_optional_dt(data, "clock_out"),
            status=status,
            note=data.get("note"),
        )
        return ok(record.to_dict(), status=201)

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    def list_attendance():
        employee_id = int_arg("employee_id")
        start, end = date_arg("start"), date_arg("end")
        if employee_id is not None:
            rows = service.list_for_employee(
                employee_id, start_date=start, end_date=end, include_deleted=bool_arg("include_deleted")
            )
        elif date_arg("date"):
            rows = service.list_by_date(date_arg("date"))
        else:
            rows = service.recent(limit=int_arg("limit", DEFAULT_RECENT_LIMIT))
        return ok(_records(rows), count=len(rows))

    @app.route("/api/attendance/<int:attendance_id>", methods=["GET"], endpoint="attendance_get")
    def get_attendance(attendance_id: int):
        return ok(service.get(attendance_id, include_deleted=bool_arg("include_deleted")).to_dict())

    @app.route("/api/attendance/<int:attendance_id>", methods=["PATCH"], endpoint="attendance_edit")
    def edit_attendance(attendance_id: int):
        data = json_body()
        changes = AttendanceUpdate(
            employee_id=int_field(data, "employee_id", required=False),
            work_date=parse_iso_date(data["work_date"]) if data.get("work_date") else None,
            clock_in=_optional_dt(data, "clock_in"),
            clock_out=_optional_dt(data, "clock_out"),
            clear_clock_out="clock_out" in data and data["clock_out"] is None,
            status=parse_enum(AttendanceStatus, data["status"], "status") if data.get("status") else None,
            note=data.get("note"),
        )
        return ok(service.edit_attendance(attendance_id, changes).to_dict())

    @app.route("/api/attendance/<int:attendance_id>", methods=["DELETE"], endpoint="attendance_delete")
    def delete_attendance(attendance_id: int):
        service.delete_attendance(attendance_id)
        return ok({"attendance_id": attendance_id, "deleted": True})

    @app.route("/api/attendance/<int:attendance_id>/restore", methods=["POST"], endpoint="attendance_restore")
    def restore_attendance(attendance_id: int):
        return ok(service.restore_attendance(attendance_id).to_dict())

    @app.route("/api/attendance/<int:attendance_id>/purge", methods=["DELETE"], endpoint="attendance_purge")
    def purge_attendance(attendance_id: int):
        service.purge_attendance(attendance_id)
        log.warning("Attendance %s purged through the API", attendance_id)
        return ok({"attendance_id": attendance_id, "purged": True})

    # ---- reports ----------------------------------------------------

    @app.route("/api/attendance/late", methods=["GET"], endpoint="attendance_late")
    def late_arrivals():
        rows = service.late_arrivals(start_date=date_arg("start"), end_date=date_arg("end"))
        return ok(_records(rows), count=len(rows))

    @app.route("/api/attendance/overtime", methods=["GET"], endpoint="attendance_overtime")
    def overtime():
        rows = service.overtime(start_date=date_arg("start"), end_date=date_arg("end"))
        return ok(_records(rows), count=len(rows))

    @app.route("/api/attendance/work-from-home", methods=["GET"], endpoint="attendance_wfh")
    def work_from_home():
        rows = service.work_from_home(start_date=date_arg("start"), end_date=date_arg("end"))
        return ok(_records(rows), count=len(rows))

    @app.route("/api/attendance/needs-clock-out", methods=["GET"], endpoint="attendance_needs_clock_out")
    def needing_clock_out():
        rows = service.needing_clock_out(work_date=date_arg("date"))
        return ok(_records(rows), count=len(rows))

    @app.route("/api/attendance/status/<status>", methods=["GET"], endpoint="attendance_by_status")
    def by_status(status: str):
        rows = service.list_by_status(
            parse_enum(AttendanceStatus, status, "status"), start_date=date_arg("start"), end_date=date_arg("end")
        )
        return ok(_records(rows), count=len(rows))

    @app.route("/api/attendance/employee/<int:employee_id>/monthly", methods=["GET"], endpoint="attendance_monthly")
    def monthly(employee_id: int):
        year, month = int_arg("year"), int_arg("month")
        if year is None or month is None:
            raise ValidationError("year and month are required")
        return ok(service.monthly_summary(employee_id, year, month))

    @app.route("/api/attendance/employee/<int:employee_id>/hours", methods=["GET"], endpoint="attendance_hours")
    def total_hours(employee_id: int):
        start, end = date_arg("start"), date_arg("end")
        if not start or not end:
            raise ValidationError("start and end are required")
        return ok({"employee_id": employee_id, "total_hours": service.total_hours(employee_id, start, end)})

    @app.route("/api/attendance/summary/status", methods=["GET"], endpoint="attendance_status_summary")
    def status_summary():
        start, end = date_arg("start"), date_arg("end")
        if not start or not end:
            raise ValidationError("start and end are required")
        return ok(service.status_summary(start, end))
