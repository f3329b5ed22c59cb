from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision, WorkdayPolicy


class LateStrategy(AttendanceStrategy):
    """Late clock-in."""

    def decide_clock_in(self, *, clock_in: Optional[datetime], policy: WorkdayPolicy) -> StatusDecision:
        note = None
        if clock_in is not None:
            start = datetime.combine(clock_in.date(), policy.start)
            late_minutes = int((clock_in - start).total_seconds() // 60)
            if late_minutes > 0:
                note = f"Late by {late_minutes} min"
        return StatusDecision(status=AttendanceStatus.LATE, note=note)
