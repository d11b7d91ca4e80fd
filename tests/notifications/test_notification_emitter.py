from __future__ import annotations

import logging
from datetime import datetime, timezone

import pytest

from src.geo_attendance.geo_attendance.attendance.model import AttendanceRecord, Location
from src.geo_attendance.geo_attendance.container import build_services
from src.geo_attendance.geo_attendance.core.enums import AttendanceStatus
from src.geo_attendance.geo_attendance.notifications.emitter import NotificationEmitter


class InMemorySink:
    def __init__(self, admin_ids=(100, 101)):
        self.admin_ids = list(admin_ids)
        self.created = []

    def list_active_admin_ids(self):
        return self.admin_ids

    def create_notification(self, notification):
        self.created.append(notification)
        return len(self.created)


class BrokenSink(InMemorySink):
    def create_notification(self, notification):
        raise RuntimeError("notification store down")


@pytest.fixture
def record() -> AttendanceRecord:
    check_in = datetime(2025, 3, 10, 4, 0, tzinfo=timezone.utc)
    return AttendanceRecord(
        attendance_id=5,
        employee_id=7,
        user_id=1,
        calendar_date=datetime(2025, 3, 9, 18, 30, tzinfo=timezone.utc),
        check_in_time=check_in,
        check_in_location=Location(latitude=22.3, longitude=73.1, address=""),
        status=AttendanceStatus.PRESENT,
    )


def test_check_in_notification_targets_admins(employee, record):
    sink = InMemorySink()
    emitter = NotificationEmitter(sink, max_workers=1)
    try:
        assert emitter.notify_check_in(record, employee).result(timeout=5) == 1
    finally:
        emitter.shutdown()

    n = sink.created[0]
    assert n.title == "Employee Check-in"
    assert n.message == "Asha Patel has checked in for work"
    assert n.type == "info"
    assert n.category == "attendance"
    assert n.priority == "medium"
    assert n.target_users == (100, 101)
    assert n.sender == 1
    assert n.related_entity.model == "Attendance"
    assert n.related_entity.id == 5
    assert n.metadata["location"] == "Office Location"
    assert n.metadata["employeeId"] == "EMP007"


def test_check_out_notification_includes_working_minutes(employee, record):
    closed = AttendanceRecord(
        **{
            **record.__dict__,
            "check_out_time": datetime(2025, 3, 10, 13, 0, tzinfo=timezone.utc),
            "check_out_location": Location(latitude=22.3, longitude=73.1, address="Lobby"),
            "working_minutes": 540,
        }
    )
    sink = InMemorySink()
    emitter = NotificationEmitter(sink)
    try:
        emitter.notify_check_out(closed, employee).result(timeout=5)
    finally:
        emitter.shutdown()

    n = sink.created[0]
    assert n.title == "Employee Check-out"
    assert n.message == "Asha Patel has checked out from work"
    assert n.metadata["workingHours"] == 540
    assert n.metadata["location"] == "Lobby"


def test_no_admins_means_no_notification(employee, record):
    sink = InMemorySink(admin_ids=())
    emitter = NotificationEmitter(sink)
    try:
        assert emitter.notify_check_in(record, employee).result(timeout=5) is None
    finally:
        emitter.shutdown()

    assert sink.created == []


def test_failure_is_logged_not_raised(employee, record, caplog):
    emitter = NotificationEmitter(BrokenSink())
    with caplog.at_level(logging.ERROR):
        future = emitter.notify_check_in(record, employee)
        assert isinstance(future.exception(timeout=5), RuntimeError)
        emitter.shutdown()

    assert "Failed to send attendance notification" in caplog.text


def test_submit_after_shutdown_is_dropped(employee, record):
    emitter = NotificationEmitter(InMemorySink())
    emitter.shutdown()

    assert emitter.notify_check_in(record, employee) is None


def test_recorder_survives_notification_failure(settings, attendance_repo, employees, clock, in_office):
    emitter = NotificationEmitter(BrokenSink())
    svc = build_services(
        settings=settings, attendance_repo=attendance_repo, employees_repo=employees, notifier=emitter, clock=clock
    )
    try:
        record = svc.check_in(1, location=in_office)
    finally:
        emitter.shutdown()

    assert record.attendance_id == 1
    assert len(attendance_repo.all()) == 1
