from __future__ import annotations

from ...core.constants import EARLY_DEPARTURE_NOTE
from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class EarlyDepartureStrategy(AttendanceStrategy):
    """Check-out before the standard exit time: keep the status, add a note."""

    def decide_checkin(self, *, late_minutes: int) -> StatusDecision:
        # Only chosen for check-out; a check-in decision carries no lateness.
        return StatusDecision(status=AttendanceStatus.PRESENT)

    def decide_checkout(self, *, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current, note=EARLY_DEPARTURE_NOTE)
