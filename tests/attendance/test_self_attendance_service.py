from __future__ import annotations

from datetime import date, datetime, time, timedelta

import pytest

from sikaji.attendance.fingerprint import DeviceInfo, decode_device_fingerprint
from sikaji.attendance.model import AttendanceRecord
from sikaji.attendance.security import LocationHistory, PositionSample
from sikaji.core.enums import AttendanceStatus, PermitStatus
from sikaji.core.exceptions import (
    OutsideGeofenceError,
    ScheduleMissingError,
    SpoofedLocationError,
    ValidationError,
)
from sikaji.permits.model import Permit
from sikaji.schedules.model import Schedule


def _sample(now, lat=-6.9000, lng=110.2000, accuracy=12.0):
    return PositionSample(latitude=lat, longitude=lng, accuracy=accuracy, timestamp=now)


def test_check_in_on_time_at_main_gate(container, repos, student, fixed_now):
    result = container.self_attendance_service.check_in(
        student, _sample(fixed_now), LocationHistory(), now=fixed_now
    )

    assert result.status == AttendanceStatus.PRESENT
    assert result.location.name == "Main Gate"
    assert result.violation_created is False

    rec = repos.attendance.get_today_record(student.student_id, fixed_now.date())
    assert rec.status == AttendanceStatus.PRESENT
    assert rec.check_in_time == time(7, 0, 0)
    assert rec.check_in_location_id == 1
    assert rec.notes == "Hadir tepat waktu"
    assert repos.discipline.violations == []


def test_check_in_late_records_violation(container, repos, student):
    now = datetime(2026, 2, 2, 8, 0, 0)

    result = container.self_attendance_service.check_in(student, _sample(now), LocationHistory(), now=now)

    assert result.status == AttendanceStatus.LATE
    assert result.violation_created is True
    assert result.notes == "Anda terlambat 30 menit"

    rec = repos.attendance.get_today_record(student.student_id, now.date())
    assert rec.status == AttendanceStatus.LATE
    assert rec.violation_created is True

    [violation] = repos.discipline.violations
    assert violation.violation_type == "Terlambat"
    assert violation.point_deduction == 5
    assert violation.violation_date == now.date()


def test_check_in_without_schedule_is_disabled(container, repos, student):
    sunday = datetime(2026, 2, 1, 7, 0, 0)

    with pytest.raises(ScheduleMissingError):
        container.self_attendance_service.check_in(student, _sample(sunday), LocationHistory(), now=sunday)

    assert repos.attendance.records == {}


def test_check_in_outside_geofence_writes_nothing(container, repos, student, fixed_now):
    far = _sample(fixed_now, lat=-6.9100)

    with pytest.raises(OutsideGeofenceError):
        container.self_attendance_service.check_in(student, far, LocationHistory(), now=fixed_now)

    assert repos.attendance.records == {}


def test_spoofed_location_is_rejected_with_warnings(container, repos, student, fixed_now):
    history = LocationHistory()
    history.append(_sample(fixed_now - timedelta(seconds=10), lat=-6.9060))

    with pytest.raises(SpoofedLocationError) as exc:
        container.self_attendance_service.check_in(
            student, _sample(fixed_now, accuracy=3), history, now=fixed_now
        )

    assert exc.value.confidence <= 30
    assert len(exc.value.warnings) == 2
    assert repos.attendance.records == {}
    assert len(history) == 2


def test_second_check_in_is_rejected(container, student, fixed_now):
    svc = container.self_attendance_service
    svc.check_in(student, _sample(fixed_now), LocationHistory(), now=fixed_now)

    later = fixed_now + timedelta(minutes=5)
    with pytest.raises(ValidationError):
        svc.check_in(student, _sample(later), LocationHistory(), now=later)


def test_check_in_overwrites_absent_placeholder(container, repos, student, fixed_now):
    repos.attendance.create_absent(student_id=student.student_id, attendance_date=fixed_now.date())

    container.self_attendance_service.check_in(student, _sample(fixed_now), LocationHistory(), now=fixed_now)

    rec = repos.attendance.get_today_record(student.student_id, fixed_now.date())
    assert rec.status == AttendanceStatus.PRESENT
    assert len(repos.attendance.records) == 1


def test_check_in_stores_device_fingerprint(container, repos, student, fixed_now):
    device = DeviceInfo(user_agent="Mozilla/5.0", language="id-ID", screen="1080x2400", canvas_data="data:image/png")

    container.self_attendance_service.check_in(student, _sample(fixed_now), LocationHistory(), device, now=fixed_now)

    rec = repos.attendance.get_today_record(student.student_id, fixed_now.date())
    decoded = decode_device_fingerprint(rec.device_fingerprint)
    assert decoded["userAgent"] == "Mozilla/5.0"
    assert decoded["screen"] == "1080x2400"


def test_class_specific_schedule_wins(container, repos, student):
    repos.schedules.schedules[2] = Schedule(
        schedule_id=2,
        name="Kelas X TKJ 1",
        day_of_week=1,
        check_in_start=time(6, 0),
        check_in_end=time(7, 0),
        check_out_start=time(14, 0),
        check_out_end=time(16, 0),
        applies_to_all_classes=False,
        class_id=student.class_id,
    )
    now = datetime(2026, 2, 2, 7, 10, 0)

    result = container.self_attendance_service.check_in(student, _sample(now), LocationHistory(), now=now)

    assert result.status == AttendanceStatus.LATE


def test_today_state_flags(container, student, fixed_now):
    svc = container.self_attendance_service

    before = svc.get_today_state(student, now=fixed_now)
    assert before.can_check_in and not before.can_check_out
    assert before.is_late is False
    assert before.geolocation_options == {"enableHighAccuracy": True, "timeout": 15000, "maximumAge": 0}

    svc.check_in(student, _sample(fixed_now), LocationHistory(), now=fixed_now)
    after = svc.get_today_state(student, now=fixed_now)
    assert not after.can_check_in and after.can_check_out


def test_today_state_without_schedule(container, student):
    state = container.self_attendance_service.get_today_state(student, now=datetime(2026, 2, 7, 7, 0, 0))

    assert state.schedule is None
    assert state.can_check_in is False


def _checked_in(container, student, fixed_now):
    container.self_attendance_service.check_in(student, _sample(fixed_now), LocationHistory(), now=fixed_now)


def test_check_out_requires_check_in(container, student, fixed_now):
    with pytest.raises(ValidationError):
        container.self_attendance_service.check_out(student, _sample(fixed_now), LocationHistory(), now=fixed_now)


def test_regular_check_out_appends_note(container, repos, student, fixed_now):
    _checked_in(container, student, fixed_now)
    now = datetime(2026, 2, 2, 15, 30, 0)

    result = container.self_attendance_service.check_out(student, _sample(now), LocationHistory(), now=now)

    rec = repos.attendance.get_today_record(student.student_id, now.date())
    assert rec.check_out_time == time(15, 30, 0)
    assert rec.notes == "Hadir tepat waktu; Pulang sesuai jadwal"
    assert result.warnings == []
    assert result.status == AttendanceStatus.PRESENT


def test_late_check_out_without_permit_warns_but_succeeds(container, repos, student, fixed_now):
    _checked_in(container, student, fixed_now)
    now = datetime(2026, 2, 2, 17, 40, 0)

    result = container.self_attendance_service.check_out(student, _sample(now), LocationHistory(), now=now)

    rec = repos.attendance.get_today_record(student.student_id, now.date())
    assert rec.check_out_time == time(17, 40, 0)
    assert rec.status == AttendanceStatus.PRESENT
    assert "17:15" in rec.notes
    assert len(result.warnings) == 1


def test_late_check_out_with_approved_permit_is_quiet(container, repos, student, fixed_now):
    _checked_in(container, student, fixed_now)
    repos.permits.permits[1] = Permit(
        permit_id=1,
        student_id=student.student_id,
        permit_type="kegiatan_setelah_jam_sekolah",
        reason="Latihan paskibra",
        start_date=date(2026, 2, 1),
        end_date=date(2026, 2, 3),
        status=PermitStatus.APPROVED,
        created_at=datetime(2026, 1, 30, 10, 0, 0),
    )
    now = datetime(2026, 2, 2, 18, 0, 0)

    result = container.self_attendance_service.check_out(student, _sample(now), LocationHistory(), now=now)

    assert result.warnings == []


def test_check_out_away_from_school_is_allowed(container, repos, student, fixed_now):
    _checked_in(container, student, fixed_now)
    now = datetime(2026, 2, 2, 15, 30, 0)

    result = container.self_attendance_service.check_out(
        student, _sample(now, lat=-6.95), LocationHistory(), now=now
    )

    assert result.location is None
    rec = repos.attendance.get_today_record(student.student_id, now.date())
    assert rec.check_out_location_id is None
    assert rec.check_out_latitude == -6.95


def test_double_check_out_is_rejected(container, student, fixed_now):
    _checked_in(container, student, fixed_now)
    svc = container.self_attendance_service
    now = datetime(2026, 2, 2, 15, 30, 0)
    svc.check_out(student, _sample(now), LocationHistory(), now=now)

    with pytest.raises(ValidationError):
        svc.check_out(student, _sample(now), LocationHistory(), now=now + timedelta(minutes=1))


def test_check_out_before_check_in_time_is_rejected(container, repos, student):
    day = date(2026, 2, 2)
    repos.attendance.records[(student.student_id, day)] = AttendanceRecord(
        attendance_id=7,
        student_id=student.student_id,
        attendance_date=day,
        status=AttendanceStatus.PRESENT,
        check_in_time=time(7, 0, 0),
    )
    now = datetime(2026, 2, 2, 6, 59, 0)

    with pytest.raises(ValidationError):
        container.self_attendance_service.check_out(student, _sample(now), LocationHistory(), now=now)


def test_spoofed_check_out_is_blocked(container, repos, student, fixed_now):
    _checked_in(container, student, fixed_now)
    now = datetime(2026, 2, 2, 15, 30, 0)

    with pytest.raises(SpoofedLocationError):
        container.self_attendance_service.check_out(
            student, _sample(now, lat=0.0, lng=0.0, accuracy=1), LocationHistory(), now=now
        )

    rec = repos.attendance.get_today_record(student.student_id, now.date())
    assert rec.check_out_time is None


def test_failed_late_check_in_leaves_no_violation(container, repos, student, monkeypatch):
    now = datetime(2026, 2, 2, 8, 0, 0)

    def broken_upsert(data):
        raise RuntimeError("connection lost")

    monkeypatch.setattr(repos.attendance, "upsert_check_in", broken_upsert)

    with pytest.raises(RuntimeError):
        container.self_attendance_service.check_in(student, _sample(now), LocationHistory(), now=now)

    assert repos.attendance.get_today_record(student.student_id, now.date()) is None
    assert repos.discipline.violations == []


def test_late_check_in_over_absent_placeholder_keeps_one_violation(container, repos, student):
    # a late arrival already on file for the day, e.g. from an earlier attempt
    day = date(2026, 2, 2)
    container.discipline_service.record_late_arrival(
        student_id=student.student_id, at=datetime(2026, 2, 2, 7, 50, 0), check_in_end=time(7, 30)
    )
    repos.attendance.create_absent(student_id=student.student_id, attendance_date=day)
    now = datetime(2026, 2, 2, 8, 0, 0)

    result = container.self_attendance_service.check_in(student, _sample(now), LocationHistory(), now=now)

    assert result.violation_created is True
    assert len(repos.discipline.violations) == 1
