from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from src.geo_attendance.geo_attendance.attendance.model import AttendanceRecord
from src.geo_attendance.geo_attendance.container import build_services
from src.geo_attendance.geo_attendance.core.exceptions import DuplicateRecordError
from src.geo_attendance.geo_attendance.core.settings import AttendanceSettings
from src.geo_attendance.geo_attendance.employees.model import Employee

IST = timezone(timedelta(hours=5, minutes=30))

OFFICE_LAT = 22.298873262930066
OFFICE_LON = 73.13129619568713

REGISTERED_FACE = tuple([1.0] * 512)


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set_ist(self, year: int, month: int, day: int, hour: int, minute: int = 0, second: int = 0) -> datetime:
        self.now = datetime(year, month, day, hour, minute, second, tzinfo=IST).astimezone(timezone.utc)
        return self.now


class InMemoryAttendance:
    """Attendance store honouring the (employee_id, calendar_date) unique key."""

    def __init__(self):
        self._lock = threading.Lock()
        self._rows: dict[int, AttendanceRecord] = {}
        self._id = 0

    def all(self) -> list[AttendanceRecord]:
        return list(self._rows.values())

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self._rows.get(int(attendance_id))

    def find_for_day(self, employee_id: int, *, start: datetime, end: datetime) -> Optional[AttendanceRecord]:
        hits = [
            r
            for r in self._rows.values()
            if r.employee_id == employee_id
            and (start <= r.calendar_date < end or start <= r.check_in_time < end)
        ]
        hits.sort(key=lambda r: r.check_in_time, reverse=True)
        return hits[0] if hits else None

    def find_latest_open(self, employee_id: int, *, since: datetime) -> Optional[AttendanceRecord]:
        hits = [
            r
            for r in self._rows.values()
            if r.employee_id == employee_id and r.check_out_time is None and r.check_in_time >= since
        ]
        hits.sort(key=lambda r: r.check_in_time, reverse=True)
        return hits[0] if hits else None

    def _in_range(self, employee_id: int, start: datetime, end: datetime) -> list[AttendanceRecord]:
        return [r for r in self._rows.values() if r.employee_id == employee_id and start <= r.calendar_date < end]

    def list_for_employee(self, employee_id: int, *, start: datetime, end: datetime, limit: int, offset: int = 0):
        items = self._in_range(employee_id, start, end)
        items.sort(key=lambda r: r.calendar_date, reverse=True)
        return items[offset:offset + limit]

    def count_for_employee(self, employee_id: int, *, start: datetime, end: datetime) -> int:
        return len(self._in_range(employee_id, start, end))

    def create(self, record: AttendanceRecord) -> int:
        with self._lock:
            for r in self._rows.values():
                if r.employee_id == record.employee_id and r.calendar_date == record.calendar_date:
                    raise DuplicateRecordError("uq_attendance_employee_day")
            self._id += 1
            self._rows[self._id] = record.with_id(self._id)
            return self._id

    def save_checkout(self, record: AttendanceRecord) -> bool:
        with self._lock:
            current = self._rows.get(record.attendance_id)
            if current is None or current.check_out_time is not None:
                return False
            self._rows[record.attendance_id] = record
            return True

    def admin_update_record(self, *, attendance_id, status, notes, is_manual_entry, manual_entry_reason, approved_by):
        current = self._rows.get(int(attendance_id))
        if current is None:
            return False
        self._rows[current.attendance_id] = replace(
            current,
            status=status,
            notes=notes,
            is_manual_entry=is_manual_entry,
            manual_entry_reason=manual_entry_reason,
            approved_by=approved_by,
        )
        return True

    def delete(self, attendance_id: int) -> bool:
        return self._rows.pop(int(attendance_id), None) is not None


class InMemoryEmployees:
    def __init__(self, *employees: Employee):
        self._by_user = {e.user_id: e for e in employees}

    def add(self, employee: Employee) -> None:
        self._by_user[employee.user_id] = employee

    def get_by_user_id(self, user_id: int) -> Optional[Employee]:
        return self._by_user.get(user_id)


class RecordingNotifier:
    def __init__(self):
        self.check_ins: list[AttendanceRecord] = []
        self.check_outs: list[AttendanceRecord] = []

    def notify_check_in(self, record, employee):
        self.check_ins.append(record)

    def notify_check_out(self, record, employee):
        self.check_outs.append(record)


@pytest.fixture
def office():
    return OFFICE_LAT, OFFICE_LON


@pytest.fixture
def settings() -> AttendanceSettings:
    return AttendanceSettings()


@pytest.fixture
def clock() -> FakeClock:
    c = FakeClock(datetime(2025, 1, 1, tzinfo=timezone.utc))
    c.set_ist(2025, 3, 10, 9, 30)
    return c


@pytest.fixture
def employee() -> Employee:
    return Employee(
        employee_id=7,
        user_id=1,
        employee_code="EMP007",
        first_name="Asha",
        last_name="Patel",
        face_descriptor=REGISTERED_FACE,
    )


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def employees(employee) -> InMemoryEmployees:
    return InMemoryEmployees(employee)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def service(settings, attendance_repo, employees, notifier, clock):
    return build_services(
        settings=settings,
        attendance_repo=attendance_repo,
        employees_repo=employees,
        notifier=notifier,
        clock=clock,
    )


@pytest.fixture
def in_office(office):
    lat, lon = office
    return {"latitude": lat, "longitude": lon, "address": "Main office", "accuracy": 12}


@pytest.fixture
def far_away(office):
    lat, lon = office
    return {"latitude": lat + 0.01, "longitude": lon}
