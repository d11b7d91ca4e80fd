from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Mapping, Optional

from ..biometrics.matcher import FaceMatcher, FaceMatchResult
from ..common.datetime_utils import local_dates_window, local_midnight_utc, month_of, now_utc
from ..common.validators import require_coordinates, require_descriptor
from ..core.constants import (
    CHECKIN_DESCRIPTOR_LENGTH,
    DEFAULT_HISTORY_LIMIT,
    FACE_CHECKIN_DEFAULT_NOTE,
    VERIFY_DESCRIPTOR_LENGTH,
)
from ..core.enums import AttendanceStatus, Role, ValidationMethod
from ..core.exceptions import (
    AlreadyCheckedOutError,
    AlreadyMarkedError,
    AuthorizationError,
    DuplicateRecordError,
    EmployeeNotFoundError,
    FaceMismatchError,
    GeofenceError,
    NoFaceRegisteredError,
    NoOpenRecordError,
    NotFoundError,
    ValidationError,
)
from ..core.settings import AttendanceSettings
from ..employees.model import Employee
from ..employees.repository import EmployeeDirectory
from ..geofence.validator import GeofenceResult, GeoFenceValidator
from ..notifications.emitter import NotificationEmitter
from .duplicate_guard import DuplicateGuard
from .factory import AttendanceStrategyFactory
from .model import (
    AttendanceRecord,
    CheckInEvent,
    CheckOutEvent,
    DeviceInfo,
    FaceVerification,
    Location,
    WorkingTime,
)
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

MAX_HISTORY_LIMIT = 366


@dataclass(frozen=True)
class FaceCheckInResult:
    record: AttendanceRecord
    face: FaceMatchResult
    geofence: GeofenceResult


@dataclass(frozen=True)
class TodayAttendance:
    record: Optional[AttendanceRecord]

    @property
    def has_checked_in(self) -> bool:
        return self.record is not None

    @property
    def has_checked_out(self) -> bool:
        return self.record is not None and self.record.check_out_time is not None

    @property
    def working_time(self) -> WorkingTime:
        if self.record is None:
            return WorkingTime.from_minutes(0)
        return self.record.working_time


@dataclass(frozen=True)
class HistoryPage:
    records: tuple[AttendanceRecord, ...]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0


class AttendanceService:
    """Check-in / check-out state machine for one employee's calendar day.

    ``NoRecordToday -> CheckedIn -> CheckedOut``. Status and lateness are
    derived once from the check-in instant; check-out only adds the
    checkout fields, the worked duration and possibly an early-departure
    note. Admins are notified after each successful write.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeDirectory,
        *,
        geofence: GeoFenceValidator,
        face_matcher: FaceMatcher,
        duplicate_guard: DuplicateGuard,
        strategy_factory: AttendanceStrategyFactory,
        notifier: NotificationEmitter,
        settings: AttendanceSettings,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._attendance = attendance
        self._employees = employees
        self._geofence = geofence
        self._face_matcher = face_matcher
        self._guard = duplicate_guard
        self._factory = strategy_factory
        self._notifier = notifier
        self._settings = settings
        self._clock = clock

    @property
    def office_radius(self) -> float:
        return self._geofence.radius

    # ---- check-in -------------------------------------------------------

    def check_in(
        self,
        user_id: int,
        *,
        location: Optional[Mapping[str, Any]],
        device_info: Optional[DeviceInfo] = None,
        notes: str = "",
        ip_address: str = "",
    ) -> AttendanceRecord:
        """Location-only check-in."""

        latitude, longitude = require_coordinates(location)
        employee = self._resolve_employee(user_id)
        self._require_within_office(employee, latitude, longitude)

        now = self._clock()
        self._guard.ensure_not_marked(employee.employee_id, now)

        event = CheckInEvent(
            employee_id=employee.employee_id,
            user_id=int(user_id),
            occurred_at=now,
            location=Location.from_payload(latitude, longitude, location),
            device_info=device_info or DeviceInfo(),
            notes=(notes or "").strip(),
            ip_address=ip_address or "",
            validation_method=ValidationMethod.LOCATION_ONLY,
        )
        record = self._create(event)
        self._notifier.notify_check_in(record, employee)
        return record

    def check_in_with_face(
        self,
        user_id: int,
        *,
        location: Optional[Mapping[str, Any]],
        face_descriptor: Any,
        device_info: Optional[DeviceInfo] = None,
        notes: str = "",
        ip_address: str = "",
    ) -> FaceCheckInResult:
        """Check-in that requires both a face match and a position inside the office radius."""

        descriptor = require_descriptor(face_descriptor, length=CHECKIN_DESCRIPTOR_LENGTH)
        latitude, longitude = require_coordinates(location)

        employee = self._resolve_employee(user_id)
        if not employee.has_face_registered:
            logger.info("Face check-in rejected: no face registered for employee=%s", employee.employee_id)
            raise NoFaceRegisteredError()

        geofence = self._require_within_office(employee, latitude, longitude)

        face = self._face_matcher.compare(descriptor, employee.face_descriptor)
        if not face.match:
            logger.info(
                "Face check-in rejected for employee=%s: similarity=%.4f threshold=%s",
                employee.employee_id,
                face.similarity,
                face.threshold,
            )
            raise FaceMismatchError(similarity=face.similarity, threshold=face.threshold)

        now = self._clock()
        self._guard.ensure_not_marked(employee.employee_id, now)

        event = CheckInEvent(
            employee_id=employee.employee_id,
            user_id=int(user_id),
            occurred_at=now,
            location=Location.from_payload(latitude, longitude, location),
            device_info=device_info or DeviceInfo(),
            notes=(notes or "").strip() or FACE_CHECKIN_DEFAULT_NOTE,
            ip_address=ip_address or "",
            validation_method=ValidationMethod.FACE_AND_LOCATION,
            face_verification=FaceVerification(similarity=face.similarity, threshold=face.threshold, verified_at=now),
        )
        record = self._create(event)
        self._notifier.notify_check_in(record, employee)
        return FaceCheckInResult(record=record, face=face, geofence=geofence)

    def _create(self, event: CheckInEvent) -> AttendanceRecord:
        strategy = self._factory.for_checkin(event.occurred_at)
        decision = strategy.decide_checkin(late_minutes=self._factory.late_minutes(event.occurred_at))

        record = AttendanceRecord(
            attendance_id=None,
            employee_id=event.employee_id,
            user_id=event.user_id,
            calendar_date=local_midnight_utc(event.occurred_at, self._settings.local_tz),
            check_in_time=event.occurred_at,
            check_in_location=event.location,
            status=decision.status,
            is_late=decision.is_late,
            late_minutes=decision.late_minutes,
            notes=event.notes,
            ip_address=event.ip_address,
            device_info=event.device_info,
            validation_method=event.validation_method,
            face_verification=event.face_verification,
        )

        try:
            attendance_id = self._attendance.create(record)
        except DuplicateRecordError:
            # Lost the race against a concurrent check-in for the same day.
            existing = self._guard.existing_for_day(event.employee_id, event.occurred_at)
            logger.info("Concurrent check-in rejected for employee=%s", event.employee_id)
            raise AlreadyMarkedError(existing) from None

        record = record.with_id(attendance_id)
        logger.info(
            "Check-in recorded: attendance_id=%s employee=%s status=%s method=%s",
            attendance_id,
            record.employee_id,
            record.status.value,
            record.validation_method.value,
        )
        return record

    # ---- check-out ------------------------------------------------------

    def check_out(
        self,
        user_id: int,
        *,
        location: Optional[Mapping[str, Any]],
        notes: str = "",
    ) -> AttendanceRecord:
        latitude, longitude = require_coordinates(location)
        result = self._geofence.check(latitude, longitude)
        if not result.within_radius:
            logger.info("Check-out rejected outside office: user=%s distance=%.1fm", user_id, result.distance)
            raise GeofenceError(distance=result.distance, radius=result.radius)

        employee = self._resolve_employee(user_id)
        now = self._clock()

        record = self._attendance.find_latest_open(
            employee.employee_id, since=now - self._settings.open_record_window
        )
        if record is None:
            today = self._guard.existing_for_day(employee.employee_id, now)
            if today is not None and not today.is_open:
                raise AlreadyCheckedOutError(today)
            raise NoOpenRecordError()

        if now <= record.check_in_time:
            raise ValidationError("Check-out time must be after check-in time")

        event = CheckOutEvent(
            occurred_at=now,
            location=Location.from_payload(latitude, longitude, location),
            notes=(notes or "").strip(),
        )
        decision = self._factory.for_checkout(now).decide_checkout(current=record.status)
        finalized = record.checked_out(event, extra_note=decision.note)

        if not self._attendance.save_checkout(finalized):
            # Another request closed the record between lookup and update.
            raise AlreadyCheckedOutError(self._attendance.get_by_id(record.attendance_id))

        logger.info(
            "Check-out recorded: attendance_id=%s employee=%s working_minutes=%s",
            finalized.attendance_id,
            finalized.employee_id,
            finalized.working_minutes,
        )
        self._notifier.notify_check_out(finalized, employee)
        return finalized

    # ---- read-only ------------------------------------------------------

    def verify_face(self, user_id: int, face_descriptor: Any) -> FaceMatchResult:
        descriptor = require_descriptor(face_descriptor, length=VERIFY_DESCRIPTOR_LENGTH)
        employee = self._resolve_employee(user_id)
        if not employee.has_face_registered:
            raise NoFaceRegisteredError()
        return self._face_matcher.compare(descriptor, employee.face_descriptor)

    def get_today(self, user_id: int) -> TodayAttendance:
        employee = self._resolve_employee(user_id)
        return TodayAttendance(record=self._guard.existing_for_day(employee.employee_id, self._clock()))

    def get_history(
        self,
        user_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        page: int = 1,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> HistoryPage:
        """Records for an inclusive local date range, newest first.

        Both dates must be given to filter by range; otherwise the current
        local month is used.
        """

        employee = self._resolve_employee(user_id)
        if start_date is None or end_date is None:
            start_date, end_date = month_of(self._clock(), self._settings.local_tz)
        if start_date > end_date:
            raise ValidationError("startDate must not be after endDate")

        limit = min(max(1, int(limit)), MAX_HISTORY_LIMIT)
        page = max(1, int(page))
        start, end = local_dates_window(start_date, end_date, self._settings.local_tz)

        records = self._attendance.list_for_employee(
            employee.employee_id, start=start, end=end, limit=limit, offset=(page - 1) * limit
        )
        total = self._attendance.count_for_employee(employee.employee_id, start=start, end=end)
        return HistoryPage(records=tuple(records), total=total, page=page, limit=limit)

    # ---- administration -------------------------------------------------

    def admin_update(
        self,
        *,
        actor_role: str,
        actor_user_id: int,
        attendance_id: int,
        status: Optional[str] = None,
        notes: Optional[str] = None,
        is_manual_entry: Optional[bool] = None,
        manual_entry_reason: Optional[str] = None,
    ) -> AttendanceRecord:
        self._require_admin(actor_role)
        record = self._require_record(attendance_id)

        new_status = record.status
        if status not in (None, ""):
            try:
                new_status = AttendanceStatus(status)
            except ValueError:
                allowed = ", ".join(s.value for s in AttendanceStatus)
                raise ValidationError(f"Invalid status. Allowed: {allowed}") from None

        self._attendance.admin_update_record(
            attendance_id=record.attendance_id,
            status=new_status,
            notes=record.notes if notes is None else str(notes),
            is_manual_entry=record.is_manual_entry if is_manual_entry is None else bool(is_manual_entry),
            manual_entry_reason=(
                record.manual_entry_reason if manual_entry_reason is None else str(manual_entry_reason)
            ),
            approved_by=int(actor_user_id),
        )
        logger.info("Attendance %s updated by admin user=%s", record.attendance_id, actor_user_id)
        return self._require_record(record.attendance_id)

    def admin_delete(self, *, actor_role: str, attendance_id: int) -> None:
        self._require_admin(actor_role)
        if not self._attendance.delete(attendance_id):
            raise NotFoundError("Attendance record not found")
        logger.info("Attendance %s deleted", attendance_id)

    # ---- helpers --------------------------------------------------------

    def _resolve_employee(self, user_id: int) -> Employee:
        employee = self._employees.get_by_user_id(int(user_id))
        if employee is None:
            raise EmployeeNotFoundError()
        if not employee.is_active:
            logger.info("Rejected request for inactive employee=%s", employee.employee_id)
            raise AuthorizationError("Employee account is inactive")
        return employee

    def _require_within_office(self, employee: Employee, latitude: float, longitude: float) -> GeofenceResult:
        result = self._geofence.check(latitude, longitude)
        if not result.within_radius:
            logger.info(
                "Check-in rejected outside office: employee=%s distance=%.1fm radius=%sm",
                employee.employee_id,
                result.distance,
                result.radius,
            )
            raise GeofenceError(distance=result.distance, radius=result.radius)
        return result

    def _require_record(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(attendance_id))
        if record is None:
            raise NotFoundError("Attendance record not found")
        return record

    @staticmethod
    def _require_admin(actor_role: str) -> None:
        if actor_role != Role.ADMIN.value:
            raise AuthorizationError("Access denied. Admin only.")
