from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

from ..common.datetime_utils import as_utc, to_naive_utc
from ..core.enums import AttendanceStatus, ValidationMethod
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord, DeviceInfo, FaceVerification, Location
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, user_id, calendar_date,
    check_in_time, check_in_latitude, check_in_longitude, check_in_address, check_in_accuracy,
    check_out_time, check_out_latitude, check_out_longitude, check_out_address, check_out_accuracy,
    working_minutes, status, is_late, late_minutes, notes, approved_by, ip_address,
    device_user_agent, device_platform, device_browser,
    validation_method, face_similarity, face_threshold, face_verified_at,
    is_manual_entry, manual_entry_reason
"""


def _opt_utc(value: Optional[datetime]) -> Optional[datetime]:
    return as_utc(value) if value is not None else None


def _opt_naive(value: Optional[datetime]) -> Optional[datetime]:
    return to_naive_utc(value) if value is not None else None


def _row_to_record(r: dict[str, Any]) -> AttendanceRecord:
    check_out_location = None
    if r.get("check_out_latitude") is not None:
        check_out_location = Location(
            latitude=float(r["check_out_latitude"]),
            longitude=float(r["check_out_longitude"]),
            address=r.get("check_out_address") or "",
            accuracy=float(r.get("check_out_accuracy") or 0),
        )

    face_verification = None
    if r.get("face_similarity") is not None:
        face_verification = FaceVerification(
            similarity=float(r["face_similarity"]),
            threshold=float(r.get("face_threshold") or 0),
            verified_at=as_utc(r.get("face_verified_at") or r["check_in_time"]),
        )

    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        user_id=int(r["user_id"]),
        calendar_date=as_utc(r["calendar_date"]),
        check_in_time=as_utc(r["check_in_time"]),
        check_in_location=Location(
            latitude=float(r["check_in_latitude"]),
            longitude=float(r["check_in_longitude"]),
            address=r.get("check_in_address") or "",
            accuracy=float(r.get("check_in_accuracy") or 0),
        ),
        status=AttendanceStatus(r["status"]),
        is_late=bool(r.get("is_late")),
        late_minutes=int(r.get("late_minutes") or 0),
        check_out_time=_opt_utc(r.get("check_out_time")),
        check_out_location=check_out_location,
        working_minutes=int(r.get("working_minutes") or 0),
        notes=r.get("notes") or "",
        approved_by=r.get("approved_by"),
        ip_address=r.get("ip_address") or "",
        device_info=DeviceInfo(
            user_agent=r.get("device_user_agent") or "",
            platform=r.get("device_platform") or "Web",
            browser=r.get("device_browser") or "Unknown",
        ),
        validation_method=ValidationMethod(r.get("validation_method") or ValidationMethod.LOCATION_ONLY.value),
        face_verification=face_verification,
        is_manual_entry=bool(r.get("is_manual_entry")),
        manual_entry_reason=r.get("manual_entry_reason") or "",
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def find_for_day(self, employee_id: int, *, start: datetime, end: datetime) -> Optional[AttendanceRecord]:
        start_n, end_n = to_naive_utc(start), to_naive_utc(end)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s
                  AND ((calendar_date >= %s AND calendar_date < %s)
                       OR (check_in_time >= %s AND check_in_time < %s))
                ORDER BY check_in_time DESC
                LIMIT 1
                """,
                (employee_id, start_n, end_n, start_n, end_n),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def find_latest_open(self, employee_id: int, *, since: datetime) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND check_out_time IS NULL AND check_in_time >= %s
                ORDER BY check_in_time DESC
                LIMIT 1
                """,
                (employee_id, to_naive_utc(since)),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def list_for_employee(
        self, employee_id: int, *, start: datetime, end: datetime, limit: int, offset: int = 0
    ) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND calendar_date >= %s AND calendar_date < %s
                ORDER BY calendar_date DESC
                LIMIT %s OFFSET %s
                """,
                (employee_id, to_naive_utc(start), to_naive_utc(end), int(limit), int(offset)),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def count_for_employee(self, employee_id: int, *, start: datetime, end: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS total
                FROM attendance_records
                WHERE employee_id=%s AND calendar_date >= %s AND calendar_date < %s
                """,
                (employee_id, to_naive_utc(start), to_naive_utc(end)),
            )
            r = fetchone(cur)
            return int(r["total"]) if r else 0

    def create(self, record: AttendanceRecord) -> int:
        fv = record.face_verification
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    employee_id, user_id, calendar_date,
                    check_in_time, check_in_latitude, check_in_longitude, check_in_address, check_in_accuracy,
                    working_minutes, status, is_late, late_minutes, notes, ip_address,
                    device_user_agent, device_platform, device_browser,
                    validation_method, face_similarity, face_threshold, face_verified_at,
                    is_manual_entry, manual_entry_reason
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    record.employee_id,
                    record.user_id,
                    to_naive_utc(record.calendar_date),
                    to_naive_utc(record.check_in_time),
                    record.check_in_location.latitude,
                    record.check_in_location.longitude,
                    record.check_in_location.address,
                    record.check_in_location.accuracy,
                    record.working_minutes,
                    record.status.value,
                    int(record.is_late),
                    record.late_minutes,
                    record.notes,
                    record.ip_address,
                    record.device_info.user_agent,
                    record.device_info.platform,
                    record.device_info.browser,
                    record.validation_method.value,
                    fv.similarity if fv else None,
                    fv.threshold if fv else None,
                    _opt_naive(fv.verified_at) if fv else None,
                    int(record.is_manual_entry),
                    record.manual_entry_reason,
                ),
            )
            return int(cur.lastrowid)

    def save_checkout(self, record: AttendanceRecord) -> bool:
        loc = record.check_out_location
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s, check_out_latitude=%s, check_out_longitude=%s,
                    check_out_address=%s, check_out_accuracy=%s, working_minutes=%s, notes=%s
                WHERE attendance_id=%s AND check_out_time IS NULL
                """,
                (
                    _opt_naive(record.check_out_time),
                    loc.latitude if loc else None,
                    loc.longitude if loc else None,
                    loc.address if loc else None,
                    loc.accuracy if loc else None,
                    record.working_minutes,
                    record.notes,
                    int(record.attendance_id),
                ),
            )
            return cur.rowcount > 0

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET status=%s, notes=%s, is_manual_entry=%s, manual_entry_reason=%s, approved_by=%s
                WHERE attendance_id=%s
                """,
                (status.value, notes, int(is_manual_entry), manual_entry_reason, approved_by, int(attendance_id)),
            )
            return cur.rowcount > 0

    def delete(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount > 0
