from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

from ...common.validators import CENTS
from .base import NetPayCalculator


class StandardNetPayCalculator(NetPayCalculator):
    """Standard rule: salary + bonus - deductions."""

    def net_pay(self, *, salary: Decimal, bonus: Decimal, deductions: Decimal) -> Decimal:
        return (salary + bonus - deductions).quantize(CENTS, rounding=ROUND_HALF_UP)
