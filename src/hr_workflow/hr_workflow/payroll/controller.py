from __future__ import annotations

import logging

from flask import Flask
from werkzeug.exceptions import NotFound

from ..common.datetime_utils import parse_iso_date
from ..common.http import bool_arg, date_arg, enum_arg, int_arg, int_field, json_body, ok
from ..core.constants import DEFAULT_RECENT_LIMIT, DEFAULT_STALE_DRAFT_DAYS
from ..core.enums import PayrollStatus
from ..core.exceptions import ValidationError
from .model import PayrollItem, PayrollUpdate

log = logging.getLogger(__name__)


def _required_date(data: dict, key: str):
    if not data.get(key):
        raise ValidationError(f"{key} is required")
    return parse_iso_date(data[key])


def _optional_date(data: dict, key: str):
    return parse_iso_date(data[key]) if data.get(key) else None


def _item(data: dict) -> PayrollItem:
    if not isinstance(data, dict):
        raise ValidationError("Each payroll item must be a JSON object")
    return PayrollItem(
        employee_id=int_field(data, "employee_id"),
        pay_period_start=_required_date(data, "pay_period_start"),
        pay_period_end=_required_date(data, "pay_period_end"),
        salary=data.get("salary"),
        bonus=data.get("bonus", 0),
        deductions=data.get("deductions", 0),
        net_pay=data.get("net_pay"),
    )


def _records(rows):
    return [r.to_dict() for r in rows]


def register(app: Flask, container) -> None:
    service = container.payroll_service

    @app.route("/api/payroll", methods=["POST"], endpoint="payroll_create")
    def create_payroll():
        item = _item(json_body())
        rec = service.create(
            item.employee_id,
            item.pay_period_start,
            item.pay_period_end,
            item.salary,
            bonus=item.bonus,
            deductions=item.deductions,
            net_pay=item.net_pay,
        )
        return ok(rec.to_dict(), status=201)

    @app.route("/api/payroll", methods=["GET"], endpoint="payroll_list")
    def list_payroll():
        employee_id = int_arg("employee_id")
        status = enum_arg(PayrollStatus, "status")
        period_start, period_end = date_arg("period_start"), date_arg("period_end")
        if employee_id is not None:
            rows = service.list_for_employee(employee_id, include_deleted=bool_arg("include_deleted"))
        elif status is not None:
            rows = service.list_by_status(status)
        elif period_start and period_end:
            rows = service.list_for_period(period_start, period_end)
        else:
            rows = service.recent(limit=int_arg("limit", DEFAULT_RECENT_LIMIT))
        return ok(_records(rows), count=len(rows))

    @app.route("/api/payroll/bulk", methods=["POST"], endpoint="payroll_bulk_create")
    def bulk_create():
        data = json_body()
        raw = data.get("items")
        if not isinstance(raw, list):
            raise ValidationError("items must be a list")

        items = []
        for index, entry in enumerate(raw):
            try:
                items.append(_item(entry))
            except ValidationError as e:
                log.warning("Payroll bulk item %s rejected at intake: %s", index, e)
        created = service.bulk_create(items)
        return ok(_records(created), status=201, submitted=len(raw), created=len(created))

    @app.route("/api/payroll/bulk-approve", methods=["POST"], endpoint="payroll_bulk_approve")
    def bulk_approve():
        data = json_body()
        ids = data.get("ids")
        if not isinstance(ids, list) or not ids:
            raise ValidationError("ids must be a non-empty list")
        approved = service.bulk_approve([int_field({"id": v}, "id") for v in ids])
        return ok(_records(approved), count=len(approved))

    @app.route("/api/payroll/overdue", methods=["GET"], endpoint="payroll_overdue")
    def overdue():
        rows = service.overdue(int_arg("days"))
        return ok(_records(rows), count=len(rows))

    @app.route("/api/payroll/stale-drafts", methods=["GET"], endpoint="payroll_stale_drafts")
    def stale_drafts():
        rows = service.stale_drafts(int_arg("days", DEFAULT_STALE_DRAFT_DAYS))
        return ok(_records(rows), count=len(rows))

    @app.route("/api/payroll/summary/status", methods=["GET"], endpoint="payroll_summary_by_status")
    def summary_by_status():
        start, end = date_arg("start"), date_arg("end")
        if not start or not end:
            raise ValidationError("start and end are required")
        return ok(service.summary_by_status(start, end))

    @app.route("/api/payroll/employee/<int:employee_id>/annual", methods=["GET"], endpoint="payroll_annual")
    def annual(employee_id: int):
        year = int_arg("year")
        if year is None:
            raise ValidationError("year is required")
        return ok({"employee_id": employee_id, "year": year, "net_pay": service.annual_net_pay(employee_id, year)})

    @app.route("/api/payroll/<int:payroll_id>", methods=["GET"], endpoint="payroll_get")
    def get_payroll(payroll_id: int):
        return ok(service.get(payroll_id, include_deleted=bool_arg("include_deleted")).to_dict())

    @app.route("/api/payroll/<int:payroll_id>", methods=["PATCH"], endpoint="payroll_update")
    def update_payroll(payroll_id: int):
        data = json_body()
        changes = PayrollUpdate(
            employee_id=int_field(data, "employee_id", required=False),
            pay_period_start=_optional_date(data, "pay_period_start"),
            pay_period_end=_optional_date(data, "pay_period_end"),
            salary=data.get("salary"),
            bonus=data.get("bonus"),
            deductions=data.get("deductions"),
            net_pay=data.get("net_pay"),
        )
        return ok(service.update(payroll_id, changes).to_dict())

    @app.route("/api/payroll/<int:payroll_id>/<action>", methods=["POST"], endpoint="payroll_transition")
    def transition(payroll_id: int, action: str):
        handlers = {
            "submit": service.submit,
            "approve": service.approve,
            "reject": service.reject,
            "process": service.process,
            "complete": service.complete,
            "fail": service.fail,
            "restore": service.restore,
        }
        handler = handlers.get(action)
        if handler is None:
            raise NotFound(f"Unknown payroll action: {action}")
        return ok(handler(payroll_id).to_dict())

    @app.route("/api/payroll/<int:payroll_id>", methods=["DELETE"], endpoint="payroll_delete")
    def delete_payroll(payroll_id: int):
        service.delete(payroll_id)
        return ok({"payroll_id": payroll_id, "deleted": True})
