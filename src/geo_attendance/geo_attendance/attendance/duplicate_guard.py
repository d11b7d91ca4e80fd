from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import Optional

from ..common.datetime_utils import day_window
from ..core.exceptions import AlreadyMarkedError
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class DuplicateGuard:
    """Pre-check for the one-record-per-employee-per-local-day rule.

    The storage unique key on (employee_id, calendar_date) remains the
    authoritative backstop; this only rejects the common case early.
    """

    def __init__(self, attendance: AttendanceRepository, *, local_tz: tzinfo):
        self._attendance = attendance
        self._local_tz = local_tz

    def existing_for_day(self, employee_id: int, instant: datetime) -> Optional[AttendanceRecord]:
        start, end = day_window(instant, self._local_tz)
        return self._attendance.find_for_day(employee_id, start=start, end=end)

    def ensure_not_marked(self, employee_id: int, instant: datetime) -> None:
        existing = self.existing_for_day(employee_id, instant)
        if existing is not None:
            logger.info(
                "Attendance already marked for employee=%s (attendance_id=%s)",
                employee_id,
                existing.attendance_id,
            )
            raise AlreadyMarkedError(existing)
