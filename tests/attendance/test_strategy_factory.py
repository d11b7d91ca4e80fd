from datetime import datetime, time, timedelta, timezone

import pytest

from src.geo_attendance.geo_attendance.attendance.factory import AttendanceStrategyFactory
from src.geo_attendance.geo_attendance.attendance.strategies.early_departure_strategy import EarlyDepartureStrategy
from src.geo_attendance.geo_attendance.attendance.strategies.half_day_strategy import HalfDayStrategy
from src.geo_attendance.geo_attendance.attendance.strategies.late_strategy import LateStrategy
from src.geo_attendance.geo_attendance.attendance.strategies.on_time_strategy import OnTimeStrategy
from src.geo_attendance.geo_attendance.core.constants import EARLY_DEPARTURE_NOTE
from src.geo_attendance.geo_attendance.core.enums import AttendanceStatus

IST = timezone(timedelta(hours=5, minutes=30))


def _factory() -> AttendanceStrategyFactory:
    return AttendanceStrategyFactory(
        local_tz=IST,
        late_cutoff=time(10, 0),
        half_day_late_minutes=240,
        early_departure_cutoff=time(19, 0),
    )


def _decide(local: datetime):
    factory = _factory()
    strategy = factory.for_checkin(local)
    return strategy, strategy.decide_checkin(late_minutes=factory.late_minutes(local))


def test_factory_checkin_before_cutoff_is_present():
    strategy, decision = _decide(datetime(2025, 1, 1, 9, 59, tzinfo=IST))

    assert isinstance(strategy, OnTimeStrategy)
    assert decision.status == AttendanceStatus.PRESENT
    assert decision.is_late is False
    assert decision.late_minutes == 0


def test_factory_checkin_exactly_at_cutoff_is_present():
    strategy, _ = _decide(datetime(2025, 1, 1, 10, 0, 0, tzinfo=IST))

    assert isinstance(strategy, OnTimeStrategy)


def test_factory_checkin_one_minute_late():
    strategy, decision = _decide(datetime(2025, 1, 1, 10, 1, tzinfo=IST))

    assert isinstance(strategy, LateStrategy)
    assert decision.status == AttendanceStatus.LATE
    assert decision.is_late is True
    assert decision.late_minutes == 1


def test_factory_checkin_seconds_past_cutoff_rounds_to_zero_minutes():
    strategy, decision = _decide(datetime(2025, 1, 1, 10, 0, 20, tzinfo=IST))

    assert isinstance(strategy, LateStrategy)
    assert decision.is_late is True
    assert decision.late_minutes == 0


def test_factory_checkin_half_day_boundary():
    strategy, decision = _decide(datetime(2025, 1, 1, 14, 0, tzinfo=IST))
    assert isinstance(strategy, LateStrategy)
    assert decision.late_minutes == 240

    strategy, decision = _decide(datetime(2025, 1, 1, 14, 1, tzinfo=IST))
    assert isinstance(strategy, HalfDayStrategy)
    assert decision.status == AttendanceStatus.HALF_DAY
    assert decision.late_minutes == 241


def test_factory_uses_local_clock_for_utc_input():
    # 04:31 UTC == 10:01 IST
    check_in = datetime(2025, 1, 1, 4, 31, tzinfo=timezone.utc)

    assert isinstance(_factory().for_checkin(check_in), LateStrategy)


@pytest.mark.parametrize(
    "local, expected",
    [
        (datetime(2025, 1, 1, 18, 59, tzinfo=IST), EarlyDepartureStrategy),
        (datetime(2025, 1, 1, 19, 0, tzinfo=IST), OnTimeStrategy),
        (datetime(2025, 1, 1, 22, 15, tzinfo=IST), OnTimeStrategy),
    ],
)
def test_factory_checkout_early_departure(local, expected):
    assert isinstance(_factory().for_checkout(local), expected)


def test_early_departure_keeps_status_and_adds_note():
    decision = EarlyDepartureStrategy().decide_checkout(current=AttendanceStatus.LATE)

    assert decision.status == AttendanceStatus.LATE
    assert decision.note == EARLY_DEPARTURE_NOTE


def test_early_departure_checkin_decision_is_neutral():
    decision = EarlyDepartureStrategy().decide_checkin(late_minutes=15)

    assert decision.status == AttendanceStatus.PRESENT
    assert decision.is_late is False
    assert decision.late_minutes == 0
    assert decision.note is None
