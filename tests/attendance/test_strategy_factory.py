from datetime import datetime, time

import pytest

from src.hr_workflow.hr_workflow.attendance.factory import AttendanceStrategyFactory
from src.hr_workflow.hr_workflow.attendance.strategies.absent_strategy import AbsentStrategy
from src.hr_workflow.hr_workflow.attendance.strategies.base import WorkdayPolicy
from src.hr_workflow.hr_workflow.attendance.strategies.late_strategy import LateStrategy
from src.hr_workflow.hr_workflow.attendance.strategies.present_strategy import PresentStrategy
from src.hr_workflow.hr_workflow.core.enums import AttendanceStatus

NINE = WorkdayPolicy(start=time(9, 0))


@pytest.mark.parametrize(
    "clock_in, expected",
    [
        (datetime(2026, 3, 2, 8, 59), PresentStrategy),
        (datetime(2026, 3, 2, 9, 0), PresentStrategy),
        (datetime(2026, 3, 2, 9, 1), LateStrategy),
    ],
)
def test_factory_picks_strategy_around_workday_start(clock_in, expected):
    strategy = AttendanceStrategyFactory().for_clock_in(clock_in=clock_in, policy=NINE)

    assert isinstance(strategy, expected)


def test_factory_without_clock_in_is_absent():
    factory = AttendanceStrategyFactory()

    assert isinstance(factory.for_clock_in(clock_in=None, policy=NINE), AbsentStrategy)
    assert factory.decide(clock_in=None, policy=NINE).status is AttendanceStatus.ABSENT


def test_one_second_after_start_is_late():
    decision = AttendanceStrategyFactory().decide(clock_in=datetime(2026, 3, 2, 9, 0, 1), policy=NINE)

    assert decision.status is AttendanceStatus.LATE


def test_grace_minutes_extend_on_time_window():
    policy = WorkdayPolicy(start=time(9, 0), grace_minutes=5)
    factory = AttendanceStrategyFactory()

    assert factory.decide(clock_in=datetime(2026, 3, 2, 9, 5), policy=policy).status is AttendanceStatus.PRESENT
    assert factory.decide(clock_in=datetime(2026, 3, 2, 9, 6), policy=policy).status is AttendanceStatus.LATE


def test_late_decision_notes_minutes_late():
    decision = AttendanceStrategyFactory().decide(clock_in=datetime(2026, 3, 2, 9, 17), policy=NINE)

    assert decision.note == "Late by 17 min"
