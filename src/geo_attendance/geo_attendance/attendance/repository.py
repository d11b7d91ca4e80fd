from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def find_for_day(self, employee_id: int, *, start: datetime, end: datetime) -> Optional[AttendanceRecord]:
        """Record whose ``calendar_date`` or ``check_in_time`` lies in ``[start, end)``."""

        raise NotImplementedError

    def find_latest_open(self, employee_id: int, *, since: datetime) -> Optional[AttendanceRecord]:
        """Most recent record without checkout whose check-in is at or after ``since``."""

        raise NotImplementedError

    def list_for_employee(
        self, employee_id: int, *, start: datetime, end: datetime, limit: int, offset: int = 0
    ) -> Sequence[AttendanceRecord]:
        """Records with ``calendar_date`` in ``[start, end)``, newest first."""

        raise NotImplementedError

    def count_for_employee(self, employee_id: int, *, start: datetime, end: datetime) -> int:
        raise NotImplementedError

    def create(self, record: AttendanceRecord) -> int:
        """Insert and return the new id.

        Raises ``DuplicateRecordError`` when (employee, calendar_date) already exists.
        """

        raise NotImplementedError

    def save_checkout(self, record: AttendanceRecord) -> bool:
        """Persist checkout fields only if the stored record is still open."""

        raise NotImplementedError

    def admin_update_record(
        self,
        *,
        attendance_id: int,
        status: AttendanceStatus,
        notes: str,
        is_manual_entry: bool,
        manual_entry_reason: str,
        approved_by: int,
    ) -> bool:
        """Admin-only override."""

        raise NotImplementedError

    def delete(self, attendance_id: int) -> bool:
        raise NotImplementedError
