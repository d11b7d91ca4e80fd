from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..employees.model import Employee
from .model import Notification, RelatedEntity
from .repository import NotificationSink

logger = logging.getLogger(__name__)


class NotificationEmitter:
    """Fire-and-forget admin notifications for attendance events.

    Work runs on a small thread pool owned by the emitter. Whatever happens
    inside a dispatch (no admins, sink down, bad data) is logged from the
    future's done-callback and never reaches the caller.
    """

    def __init__(self, sink: NotificationSink, *, max_workers: int = 2):
        self._sink = sink
        self._executor = ThreadPoolExecutor(max_workers=max(1, int(max_workers)), thread_name_prefix="notify")

    def notify_check_in(self, record: AttendanceRecord, employee: Employee) -> Optional[Future]:
        return self._submit(
            title="Employee Check-in",
            message=f"{employee.full_name} has checked in for work",
            record=record,
            employee=employee,
            metadata={
                "employeeName": employee.full_name,
                "checkInTime": record.check_in_time.isoformat(),
                "location": record.check_in_location.address or "Office Location",
                "employeeId": employee.employee_code,
            },
        )

    def notify_check_out(self, record: AttendanceRecord, employee: Employee) -> Optional[Future]:
        location = record.check_out_location
        return self._submit(
            title="Employee Check-out",
            message=f"{employee.full_name} has checked out from work",
            record=record,
            employee=employee,
            metadata={
                "employeeName": employee.full_name,
                "checkOutTime": record.check_out_time.isoformat() if record.check_out_time else None,
                "workingHours": record.working_minutes,
                "location": (location.address if location else "") or "Office Location",
                "employeeId": employee.employee_code,
            },
        )

    def shutdown(self, *, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _submit(self, *, title: str, message: str, record: AttendanceRecord, employee: Employee, metadata: dict):
        try:
            future = self._executor.submit(self._dispatch, title, message, record, employee, metadata)
        except RuntimeError:
            logger.warning("Notification executor is shut down; dropping %r for employee=%s", title, employee.employee_id)
            return None
        future.add_done_callback(self._log_failure)
        return future

    def _dispatch(self, title: str, message: str, record: AttendanceRecord, employee: Employee, metadata: dict):
        admin_ids = tuple(self._sink.list_active_admin_ids())
        if not admin_ids:
            logger.info("No active admins to notify for %r", title)
            return None

        notification = Notification(
            title=title,
            message=message,
            target_users=admin_ids,
            type="info",
            category="attendance",
            sender=employee.user_id,
            priority="medium",
            related_entity=RelatedEntity(model="Attendance", id=int(record.attendance_id or 0)),
            metadata=metadata,
        )
        notification_id = self._sink.create_notification(notification)
        logger.info("%s notification %s sent to %d admin(s)", title, notification_id, len(admin_ids))
        return notification_id

    @staticmethod
    def _log_failure(future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Failed to send attendance notification", exc_info=exc)
