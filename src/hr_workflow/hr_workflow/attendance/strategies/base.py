from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, time
from typing import Optional

from ...core.enums import AttendanceStatus


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    note: Optional[str] = None


@dataclass(frozen=True)
class WorkdayPolicy:
    """When the working day starts and how much slack a clock-in gets."""

    start: time
    grace_minutes: int = 0


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide an attendance status at clock-in."""

    @abstractmethod
    def decide_clock_in(self, *, clock_in: Optional[datetime], policy: WorkdayPolicy) -> StatusDecision:
        raise NotImplementedError
