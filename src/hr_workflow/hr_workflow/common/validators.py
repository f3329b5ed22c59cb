from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Any, Optional, Type, TypeVar

from ..core.exceptions import ValidationError

CENTS = Decimal("0.01")
# DECIMAL(15, 2) columns
MAX_MONEY = Decimal("9999999999999.99")

E = TypeVar("E", bound=Enum)


def optional_text(value: Optional[str]) -> Optional[str]:
    return (value or "").strip() or None


def require_positive_id(value: Any, field_name: str) -> int:
    try:
        ident = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
    if ident <= 0:
        raise ValidationError(f"{field_name} must be positive")
    return ident


def to_money(value: Any, field_name: str, *, allow_negative: bool = False) -> Decimal:
    """Coerce to a two-place Decimal amount."""
    if value is None or value == "":
        raise ValidationError(f"{field_name} is required")
    try:
        amount = Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not amount.is_finite():
        raise ValidationError(f"{field_name} must be a number")
    if abs(amount) > MAX_MONEY:
        raise ValidationError(f"{field_name} cannot exceed {MAX_MONEY}")
    if not allow_negative and amount < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    return amount


def require_date_order(start: date, end: date, *, start_name: str = "Start date", end_name: str = "End date") -> None:
    if end < start:
        raise ValidationError(f"{end_name} cannot be before {start_name.lower()}")


def parse_enum(enum_cls: Type[E], value: Any, field_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value or "").strip().upper())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")
