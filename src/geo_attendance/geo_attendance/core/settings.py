from __future__ import annotations

from dataclasses import dataclass
from datetime import time, timedelta, timezone
from types import ModuleType

from . import constants


def _parse_hhmm(value: str | time) -> time:
    if isinstance(value, time):
        return value
    hours, _, minutes = str(value).strip().partition(":")
    return time(hour=int(hours), minute=int(minutes or 0))


@dataclass(frozen=True)
class AttendanceSettings:
    """Process-wide attendance configuration, loaded once at startup."""

    office_latitude: float = constants.DEFAULT_OFFICE_LATITUDE
    office_longitude: float = constants.DEFAULT_OFFICE_LONGITUDE
    office_radius_meters: float = constants.DEFAULT_OFFICE_RADIUS_METERS
    face_similarity_threshold: float = constants.DEFAULT_FACE_SIMILARITY_THRESHOLD
    utc_offset_minutes: int = constants.DEFAULT_UTC_OFFSET_MINUTES
    late_cutoff: time = _parse_hhmm(constants.DEFAULT_LATE_CUTOFF)
    early_departure_cutoff: time = _parse_hhmm(constants.DEFAULT_EARLY_DEPARTURE_CUTOFF)
    half_day_late_minutes: int = constants.DEFAULT_HALF_DAY_LATE_MINUTES
    open_record_window_hours: int = constants.DEFAULT_OPEN_RECORD_WINDOW_HOURS
    notification_workers: int = constants.DEFAULT_NOTIFICATION_WORKERS

    @property
    def local_tz(self) -> timezone:
        return timezone(timedelta(minutes=self.utc_offset_minutes))

    @property
    def open_record_window(self) -> timedelta:
        return timedelta(hours=self.open_record_window_hours)

    @classmethod
    def from_module(cls, settings: ModuleType) -> "AttendanceSettings":
        """Build from a ``config.*`` settings module; missing names keep defaults."""

        defaults = cls()
        return cls(
            office_latitude=float(getattr(settings, "OFFICE_LATITUDE", defaults.office_latitude)),
            office_longitude=float(getattr(settings, "OFFICE_LONGITUDE", defaults.office_longitude)),
            office_radius_meters=float(getattr(settings, "OFFICE_RADIUS_METERS", defaults.office_radius_meters)),
            face_similarity_threshold=float(
                getattr(settings, "FACE_SIMILARITY_THRESHOLD", defaults.face_similarity_threshold)
            ),
            utc_offset_minutes=int(getattr(settings, "UTC_OFFSET_MINUTES", defaults.utc_offset_minutes)),
            late_cutoff=_parse_hhmm(getattr(settings, "LATE_CUTOFF", defaults.late_cutoff)),
            early_departure_cutoff=_parse_hhmm(
                getattr(settings, "EARLY_DEPARTURE_CUTOFF", defaults.early_departure_cutoff)
            ),
            half_day_late_minutes=int(getattr(settings, "HALF_DAY_LATE_MINUTES", defaults.half_day_late_minutes)),
            open_record_window_hours=int(
                getattr(settings, "OPEN_RECORD_WINDOW_HOURS", defaults.open_record_window_hours)
            ),
            notification_workers=int(getattr(settings, "NOTIFICATION_WORKERS", defaults.notification_workers)),
        )
