from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, tzinfo

from ..common.datetime_utils import as_utc, minutes_half_up
from .strategies.base import AttendanceStrategy
from .strategies.early_departure_strategy import EarlyDepartureStrategy
from .strategies.half_day_strategy import HalfDayStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.on_time_strategy import OnTimeStrategy


def _at_local(instant: datetime, local_tz: tzinfo, clock: time) -> tuple[datetime, datetime]:
    local = as_utc(instant).astimezone(local_tz)
    mark = local.replace(hour=clock.hour, minute=clock.minute, second=0, microsecond=0)
    return local, mark


@dataclass(frozen=True)
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on local clock rules."""

    local_tz: tzinfo
    late_cutoff: time
    half_day_late_minutes: int
    early_departure_cutoff: time

    def late_minutes(self, check_in_time: datetime) -> int:
        local, cutoff = _at_local(check_in_time, self.local_tz, self.late_cutoff)
        if local <= cutoff:
            return 0
        return minutes_half_up(local - cutoff)

    def for_checkin(self, check_in_time: datetime) -> AttendanceStrategy:
        local, cutoff = _at_local(check_in_time, self.local_tz, self.late_cutoff)
        if local <= cutoff:
            return OnTimeStrategy()
        if self.late_minutes(check_in_time) > self.half_day_late_minutes:
            return HalfDayStrategy()
        return LateStrategy()

    def for_checkout(self, check_out_time: datetime) -> AttendanceStrategy:
        local, cutoff = _at_local(check_out_time, self.local_tz, self.early_departure_cutoff)
        if local < cutoff:
            return EarlyDepartureStrategy()
        return OnTimeStrategy()
