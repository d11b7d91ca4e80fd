from __future__ import annotations

from dataclasses import dataclass

from .attendance.duplicate_guard import DuplicateGuard
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .biometrics.matcher import FaceMatcher
from .core.settings import AttendanceSettings
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeDirectory
from .geofence.validator import GeoFenceValidator, GeoPoint
from .notifications.emitter import NotificationEmitter
from .notifications.mysql_notification_repository import MySQLNotificationSink


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    settings: AttendanceSettings

    attendance_repo: MySQLAttendanceRepository
    employees_repo: MySQLEmployeeDirectory
    notifications_repo: MySQLNotificationSink

    notifier: NotificationEmitter
    attendance_service: AttendanceService


def build_services(
    *,
    settings: AttendanceSettings,
    attendance_repo,
    employees_repo,
    notifier: NotificationEmitter,
    clock=None,
) -> AttendanceService:
    """Wire the recorder and its validators from settings; repositories are supplied by the caller."""

    strategy_factory = AttendanceStrategyFactory(
        local_tz=settings.local_tz,
        late_cutoff=settings.late_cutoff,
        half_day_late_minutes=settings.half_day_late_minutes,
        early_departure_cutoff=settings.early_departure_cutoff,
    )
    kwargs = {"clock": clock} if clock is not None else {}
    return AttendanceService(
        attendance_repo,
        employees_repo,
        geofence=GeoFenceValidator(
            GeoPoint(settings.office_latitude, settings.office_longitude), settings.office_radius_meters
        ),
        face_matcher=FaceMatcher(settings.face_similarity_threshold),
        duplicate_guard=DuplicateGuard(attendance_repo, local_tz=settings.local_tz),
        strategy_factory=strategy_factory,
        notifier=notifier,
        settings=settings,
        **kwargs,
    )


def build_container(*, db_config: dict, settings: AttendanceSettings) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    attendance_repo = MySQLAttendanceRepository(conn)
    employees_repo = MySQLEmployeeDirectory(conn)
    notifications_repo = MySQLNotificationSink(conn)

    notifier = NotificationEmitter(notifications_repo, max_workers=settings.notification_workers)
    attendance_service = build_services(
        settings=settings,
        attendance_repo=attendance_repo,
        employees_repo=employees_repo,
        notifier=notifier,
    )

    return Container(
        conn=conn,
        settings=settings,
        attendance_repo=attendance_repo,
        employees_repo=employees_repo,
        notifications_repo=notifications_repo,
        notifier=notifier,
        attendance_service=attendance_service,
    )
