from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import minutes_half_up
from ..core.enums import AttendanceStatus, ValidationMethod


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float
    address: str = ""
    accuracy: float = 0.0

    @classmethod
    def from_payload(cls, latitude: float, longitude: float, payload: Mapping[str, Any]) -> "Location":
        """Build from request data; ``address`` may be a string or an object with an ``address`` key."""

        raw_address = payload.get("address")
        if isinstance(raw_address, Mapping):
            address = raw_address.get("address") or f"{latitude:.6f}, {longitude:.6f}"
        else:
            address = str(raw_address or "")

        try:
            accuracy = float(payload.get("accuracy") or 0)
        except (TypeError, ValueError):
            accuracy = 0.0
        return cls(latitude=latitude, longitude=longitude, address=address, accuracy=accuracy)


@dataclass(frozen=True)
class DeviceInfo:
    user_agent: str = ""
    platform: str = "Web"
    browser: str = "Unknown"

    @classmethod
    def from_payload(cls, payload: Optional[Mapping[str, Any]], *, default_user_agent: str = "") -> "DeviceInfo":
        if not isinstance(payload, Mapping):
            return cls(user_agent=default_user_agent)
        return cls(
            user_agent=str(payload.get("userAgent") or default_user_agent),
            platform=str(payload.get("platform") or "Web"),
            browser=str(payload.get("browser") or "Unknown"),
        )


@dataclass(frozen=True)
class FaceVerification:
    similarity: float
    threshold: float
    verified_at: datetime


@dataclass(frozen=True)
class WorkingTime:
    hours: int
    minutes: int
    total: str
    total_minutes: int

    @classmethod
    def from_minutes(cls, total_minutes: int) -> "WorkingTime":
        total_minutes = max(0, int(total_minutes))
        hours, minutes = divmod(total_minutes, 60)
        return cls(hours=hours, minutes=minutes, total=f"{hours:02d}:{minutes:02d}", total_minutes=total_minutes)


@dataclass(frozen=True)
class CheckInEvent:
    """Everything known at the moment an employee checks in."""

    employee_id: int
    user_id: int
    occurred_at: datetime
    location: Location
    device_info: DeviceInfo
    notes: str = ""
    ip_address: str = ""
    validation_method: ValidationMethod = ValidationMethod.LOCATION_ONLY
    face_verification: Optional[FaceVerification] = None


@dataclass(frozen=True)
class CheckOutEvent:
    occurred_at: datetime
    location: Location
    notes: str = ""


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee's attendance for one local calendar day.

    Times are aware UTC datetimes. ``attendance_id`` is ``None`` until the
    record has been persisted.
    """

    attendance_id: Optional[int]
    employee_id: int
    user_id: int
    calendar_date: datetime
    check_in_time: datetime
    check_in_location: Location
    status: AttendanceStatus
    is_late: bool = False
    late_minutes: int = 0
    check_out_time: Optional[datetime] = None
    check_out_location: Optional[Location] = None
    working_minutes: int = 0
    notes: str = ""
    approved_by: Optional[int] = None
    ip_address: str = ""
    device_info: DeviceInfo = DeviceInfo()
    validation_method: ValidationMethod = ValidationMethod.LOCATION_ONLY
    face_verification: Optional[FaceVerification] = None
    is_manual_entry: bool = False
    manual_entry_reason: str = ""

    @property
    def is_open(self) -> bool:
        return self.check_out_time is None

    @property
    def working_time(self) -> WorkingTime:
        if self.check_out_time is None or not self.working_minutes:
            return WorkingTime.from_minutes(0)
        return WorkingTime.from_minutes(self.working_minutes)

    def with_id(self, attendance_id: int) -> "AttendanceRecord":
        return replace(self, attendance_id=int(attendance_id))

    def checked_out(self, event: CheckOutEvent, *, extra_note: Optional[str] = None) -> "AttendanceRecord":
        """Return the finalized record; status/lateness are left untouched."""

        notes = self.notes
        if event.notes:
            notes = f"{notes}. Checkout: {event.notes}" if notes else f"Checkout: {event.notes}"
        if extra_note:
            notes = f"{notes}. {extra_note}" if notes else extra_note

        return replace(
            self,
            check_out_time=event.occurred_at,
            check_out_location=event.location,
            working_minutes=max(0, minutes_half_up(event.occurred_at - self.check_in_time)),
            notes=notes,
        )
