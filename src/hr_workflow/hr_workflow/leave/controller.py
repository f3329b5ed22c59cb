from __future__ import annotations

from flask import Flask

from ..common.datetime_utils import parse_iso_date
from ..common.http import bool_arg, date_arg, enum_arg, int_arg, int_field, json_body, ok
from ..common.validators import parse_enum
from ..core.constants import DEFAULT_RECENT_LIMIT, DEFAULT_STALE_PENDING_DAYS
from ..core.enums import LeaveStatus, LeaveType
from ..core.exceptions import ValidationError
from .model import LeaveUpdate


def _required_date(data: dict, key: str):
    if not data.get(key):
        raise ValidationError(f"{key} is required")
    return parse_iso_date(data[key])


def register(app: Flask, container) -> None:
    service = container.leave_service

    @app.route("/api/leave-requests", methods=["POST"], endpoint="leave_create")
    def create_leave():
        data = json_body()
        req = service.create(
            int_field(data, "employee_id"),
            parse_enum(LeaveType, data.get("leave_type"), "leave_type"),
            _required_date(data, "start_date"),
            _required_date(data, "end_date"),
            data.get("reason"),
        )
        return ok(req, status=201)

    @app.route("/api/leave-requests", methods=["GET"], endpoint="leave_list")
    def list_leave():
        employee_id = int_arg("employee_id")
        status = enum_arg(LeaveStatus, "status")
        if employee_id is not None:
            rows = service.list_for_employee(employee_id, include_deleted=bool_arg("include_deleted"))
        elif status is not None:
            rows = service.list_by_status(status)
        else:
            rows = service.recent(limit=int_arg("limit", DEFAULT_RECENT_LIMIT))
        return ok(rows, count=len(rows))

    @app.route("/api/leave-requests/pending", methods=["GET"], endpoint="leave_pending")
    def pending():
        older_than = int_arg("older_than_days")
        rows = service.pending() if older_than is None else service.pending_older_than(older_than)
        return ok(rows, count=len(rows))

    @app.route("/api/leave-requests/stale", methods=["GET"], endpoint="leave_stale")
    def stale():
        rows = service.pending_older_than(int_arg("days", DEFAULT_STALE_PENDING_DAYS))
        return ok(rows, count=len(rows))

    @app.route("/api/leave-requests/approved-overlapping", methods=["GET"], endpoint="leave_overlapping_approved")
    def overlapping_approved():
        start, end = date_arg("start"), date_arg("end")
        if not start or not end:
            raise ValidationError("start and end are required")
        rows = service.overlapping_approved(start, end)
        return ok(rows, count=len(rows))

    @app.route("/api/leave-requests/summary/type", methods=["GET"], endpoint="leave_summary_by_type")
    def summary_by_type():
        start, end = date_arg("start"), date_arg("end")
        if not start or not end:
            raise ValidationError("start and end are required")
        return ok(service.summary_by_type(start, end))

    @app.route("/api/leave-requests/approved-by/<int:approver_id>", methods=["GET"], endpoint="leave_approved_by")
    def approved_by(approver_id: int):
        rows = service.approved_by(approver_id)
        return ok(rows, count=len(rows))

    @app.route("/api/leave-requests/employee/<int:employee_id>/balances", methods=["GET"], endpoint="leave_balances")
    def balances(employee_id: int):
        year = int_arg("year")
        if year is None:
            raise ValidationError("year is required")
        return ok(service.balances(employee_id, year), employee_id=employee_id, year=year)

    @app.route("/api/leave-requests/<int:leave_id>", methods=["GET"], endpoint="leave_get")
    def get_leave(leave_id: int):
        return ok(service.get(leave_id, include_deleted=bool_arg("include_deleted")))

    @app.route("/api/leave-requests/<int:leave_id>", methods=["PATCH"], endpoint="leave_update")
    def update_leave(leave_id: int):
        data = json_body()
        changes = LeaveUpdate(
            employee_id=int_field(data, "employee_id", required=False),
            leave_type=parse_enum(LeaveType, data["leave_type"], "leave_type") if data.get("leave_type") else None,
            start_date=parse_iso_date(data["start_date"]) if data.get("start_date") else None,
            end_date=parse_iso_date(data["end_date"]) if data.get("end_date") else None,
            reason=data.get("reason"),
        )
        return ok(service.update(leave_id, changes))

    @app.route("/api/leave-requests/<int:leave_id>/approve", methods=["POST"], endpoint="leave_approve")
    def approve(leave_id: int):
        data = json_body()
        return ok(service.approve(leave_id, int_field(data, "approver_id"), data.get("comments")))

    @app.route("/api/leave-requests/<int:leave_id>/reject", methods=["POST"], endpoint="leave_reject")
    def reject(leave_id: int):
        data = json_body()
        return ok(service.reject(leave_id, int_field(data, "approver_id"), data.get("comments")))

    @app.route("/api/leave-requests/<int:leave_id>/cancel", methods=["POST"], endpoint="leave_cancel")
    def cancel(leave_id: int):
        data = json_body()
        return ok(service.cancel(leave_id, data.get("reason")))

    @app.route("/api/leave-requests/<int:leave_id>", methods=["DELETE"], endpoint="leave_delete")
    def delete_leave(leave_id: int):
        service.delete(leave_id)
        return ok({"leave_id": leave_id, "deleted": True})

    @app.route("/api/leave-requests/<int:leave_id>/restore", methods=["POST"], endpoint="leave_restore")
    def restore_leave(leave_id: int):
        return ok(service.restore(leave_id))
