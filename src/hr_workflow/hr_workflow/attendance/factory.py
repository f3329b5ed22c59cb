from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from .strategies.absent_strategy import AbsentStrategy
from .strategies.base import AttendanceStrategy, StatusDecision, WorkdayPolicy
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_clock_in(self, *, clock_in: Optional[datetime], policy: WorkdayPolicy) -> AttendanceStrategy:
        if clock_in is None:
            return AbsentStrategy()

        cutoff = datetime.combine(clock_in.date(), policy.start) + timedelta(minutes=policy.grace_minutes)
        if clock_in <= cutoff:
            return PresentStrategy()
        return LateStrategy()

    def decide(self, *, clock_in: Optional[datetime], policy: WorkdayPolicy) -> StatusDecision:
        strategy = self.for_clock_in(clock_in=clock_in, policy=policy)
        return strategy.decide_clock_in(clock_in=clock_in, policy=policy)
