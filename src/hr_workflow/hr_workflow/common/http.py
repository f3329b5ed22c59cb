from __future__ import annotations

from dataclasses import asdict, is_dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from flask import jsonify, request

from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date
from .validators import parse_enum, require_positive_id


def to_json_value(value: Any) -> Any:
    """Make domain values (dataclasses, enums, dates, Decimals) JSON friendly."""

    if is_dataclass(value) and not isinstance(value, type):
        return {k: to_json_value(v) for k, v in asdict(value).items()}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat(timespec="seconds")
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, dict):
        return {str(to_json_value(k)): to_json_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_json_value(v) for v in value]
    return value


def ok(data=None, status=200, **meta):
    payload = {"success": True, "data": to_json_value(data)}
    if meta:
        payload["meta"] = to_json_value(meta)
    return jsonify(payload), status


def fail(message="Bad Request", status=400, code=None, detail=None):
    err = {"message": message}
    if code:
        err["code"] = code
    if detail:
        err["detail"] = to_json_value(detail)
    return jsonify({"success": False, "error": err}), status


def json_body() -> dict:
    """Request JSON as a dict; an empty body reads as {}."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def int_field(data: dict, key: str, *, required: bool = True) -> Optional[int]:
    value = data.get(key)
    if value is None or value == "":
        if required:
            raise ValidationError(f"{key} is required")
        return None
    return require_positive_id(value, key)


def date_arg(key: str) -> Optional[date]:
    value = request.args.get(key)
    return parse_iso_date(value) if value else None


def int_arg(key: str, default: Optional[int] = None) -> Optional[int]:
    value = request.args.get(key)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"{key} must be an integer")


def bool_arg(key: str) -> bool:
    return (request.args.get(key) or "").strip().lower() in ("1", "true", "yes")


def enum_arg(enum_cls, key: str):
    value = request.args.get(key)
    return parse_enum(enum_cls, value, key) if value else None
