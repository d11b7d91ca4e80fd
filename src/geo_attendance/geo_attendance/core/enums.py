from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Session roles used for authorization."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class AttendanceStatus(str, Enum):
    """Attendance status as persisted."""

    PRESENT = "Present"
    LATE = "Late"
    HALF_DAY = "Half Day"
    ABSENT = "Absent"
    WORK_FROM_HOME = "Work from Home"


class ValidationMethod(str, Enum):
    LOCATION_ONLY = "location_only"
    FACE_AND_LOCATION = "face_and_location"
