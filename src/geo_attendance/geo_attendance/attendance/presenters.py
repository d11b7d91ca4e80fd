from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from .model import AttendanceRecord, Location, WorkingTime


def _iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat().replace("+00:00", "Z")


def _location(loc: Optional[Location]) -> Optional[dict[str, Any]]:
    if loc is None:
        return None
    return {
        "latitude": loc.latitude,
        "longitude": loc.longitude,
        "address": loc.address,
        "accuracy": loc.accuracy,
    }


def working_time_to_dict(wt: WorkingTime) -> dict[str, Any]:
    return {"hours": wt.hours, "minutes": wt.minutes, "total": wt.total, "totalMinutes": wt.total_minutes}


def record_to_dict(r: Optional[AttendanceRecord]) -> Optional[dict[str, Any]]:
    if r is None:
        return None

    fv = r.face_verification
    return {
        "id": r.attendance_id,
        "employeeId": r.employee_id,
        "userId": r.user_id,
        "date": _iso(r.calendar_date),
        "checkIn": {"time": _iso(r.check_in_time), "location": _location(r.check_in_location)},
        "checkOut": (
            {"time": _iso(r.check_out_time), "location": _location(r.check_out_location)}
            if r.check_out_time is not None
            else None
        ),
        "workingHours": r.working_minutes,
        "status": r.status.value,
        "isLate": r.is_late,
        "lateMinutes": r.late_minutes,
        "notes": r.notes,
        "approvedBy": r.approved_by,
        "ipAddress": r.ip_address,
        "deviceInfo": {
            "userAgent": r.device_info.user_agent,
            "platform": r.device_info.platform,
            "browser": r.device_info.browser,
        },
        "validationMethod": r.validation_method.value,
        "faceVerification": (
            {"similarity": fv.similarity, "threshold": fv.threshold, "verifiedAt": _iso(fv.verified_at)}
            if fv is not None
            else None
        ),
        "isManualEntry": r.is_manual_entry,
        "manualEntryReason": r.manual_entry_reason,
    }
