from __future__ import annotations

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class OnTimeStrategy(AttendanceStrategy):
    """On-time check-in, normal check-out."""

    def decide_checkin(self, *, late_minutes: int) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)

    def decide_checkout(self, *, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)
