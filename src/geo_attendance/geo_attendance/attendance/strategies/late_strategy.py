from __future__ import annotations

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in."""

    def decide_checkin(self, *, late_minutes: int) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.LATE, is_late=True, late_minutes=late_minutes)

    def decide_checkout(self, *, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)
