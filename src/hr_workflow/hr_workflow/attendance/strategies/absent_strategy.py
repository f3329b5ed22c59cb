from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision, WorkdayPolicy


class AbsentStrategy(AttendanceStrategy):
    """No clock-in at all (administrative marking)."""

    def decide_clock_in(self, *, clock_in: Optional[datetime], policy: WorkdayPolicy) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.ABSENT)
