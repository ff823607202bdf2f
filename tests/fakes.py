"""In-memory repositories shared by the service and API tests."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

from sikaji.attendance.model import AttendanceRecord, CheckInData, CheckOutData
from sikaji.core.enums import AttendanceStatus, PermitStatus
from sikaji.discipline.model import PointTotals, Violation
from sikaji.locations.model import Location
from sikaji.permits.model import Permit
from sikaji.schedules.model import Schedule, ScheduleInput
from sikaji.students.model import Student
from sikaji.users.model import User


class InMemoryUsers:
    def __init__(self, users=()):
        self.users = {u.user_id: u for u in users}

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(int(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        for u in self.users.values():
            if u.email.lower() == email.strip().lower():
                return u
        return None


class InMemoryStudents:
    def __init__(self, students=()):
        self.students = {s.student_id: s for s in students}

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self.students.get(int(student_id))

    def get_by_user_id(self, user_id: int) -> Optional[Student]:
        for s in self.students.values():
            if s.user_id == int(user_id):
                return s
        return None

    def list_active(self, *, class_id: Optional[int] = None):
        out = [s for s in self.students.values() if s.is_active and (class_id is None or s.class_id == class_id)]
        return sorted(out, key=lambda s: s.full_name)


class InMemoryLocations:
    def __init__(self, locations=()):
        self.locations = {loc.location_id: loc for loc in locations}

    def get_active_locations(self):
        return [loc for loc in sorted(self.locations.values(), key=lambda x: x.location_id) if loc.is_active]

    def list_all(self):
        return sorted(self.locations.values(), key=lambda x: x.location_id)

    def get_by_id(self, location_id: int) -> Optional[Location]:
        return self.locations.get(int(location_id))

    def create(self, *, name, latitude, longitude, radius_meters) -> int:
        new_id = max(self.locations, default=0) + 1
        self.locations[new_id] = Location(new_id, name, latitude, longitude, radius_meters, True)
        return new_id

    def update(self, *, location_id, name, latitude, longitude, radius_meters, is_active) -> bool:
        if location_id not in self.locations:
            return False
        self.locations[location_id] = Location(location_id, name, latitude, longitude, radius_meters, is_active)
        return True

    def set_active(self, *, location_id, is_active) -> bool:
        loc = self.locations.get(location_id)
        if loc is None:
            return False
        self.locations[location_id] = replace(loc, is_active=is_active)
        return True


class InMemorySchedules:
    def __init__(self, schedules=()):
        self.schedules = {s.schedule_id: s for s in schedules}

    def get_schedule_for_day(self, day_of_week: int, class_id: Optional[int] = None) -> Optional[Schedule]:
        candidates = [
            s
            for s in self.schedules.values()
            if s.is_active
            and s.day_of_week == day_of_week
            and (s.applies_to_all_classes or (class_id is not None and s.class_id == class_id))
        ]
        if not candidates:
            return None
        candidates.sort(
            key=lambda s: (s.class_id is not None and s.class_id == class_id, s.schedule_id), reverse=True
        )
        return candidates[0]

    def list_all(self):
        return sorted(self.schedules.values(), key=lambda s: (s.day_of_week, s.check_in_start))

    def get_by_id(self, schedule_id: int) -> Optional[Schedule]:
        return self.schedules.get(int(schedule_id))

    def create(self, data: ScheduleInput) -> int:
        new_id = max(self.schedules, default=0) + 1
        self.schedules[new_id] = Schedule(schedule_id=new_id, **data.__dict__)
        return new_id

    def update(self, schedule_id: int, data: ScheduleInput) -> bool:
        if schedule_id not in self.schedules:
            return False
        self.schedules[schedule_id] = Schedule(schedule_id=schedule_id, **data.__dict__)
        return True

    def delete(self, schedule_id: int) -> bool:
        return self.schedules.pop(int(schedule_id), None) is not None


class InMemoryAttendance:
    def __init__(self):
        self.records: dict[tuple[int, date], AttendanceRecord] = {}
        self._id = 0

    def _next_id(self) -> int:
        self._id += 1
        return self._id

    def get_today_record(self, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        return self.records.get((student_id, attendance_date))

    def upsert_check_in(self, data: CheckInData) -> int:
        key = (data.student_id, data.attendance_date)
        existing = self.records.get(key)
        attendance_id = existing.attendance_id if existing else self._next_id()
        self.records[key] = AttendanceRecord(
            attendance_id=attendance_id,
            student_id=data.student_id,
            attendance_date=data.attendance_date,
            status=data.status,
            check_in_time=data.check_in_time,
            check_in_latitude=data.latitude,
            check_in_longitude=data.longitude,
            check_in_location_id=data.location_id,
            notes=data.notes,
            device_fingerprint=data.device_fingerprint,
            violation_created=data.violation_created,
        )
        return attendance_id

    def update_check_out(self, data: CheckOutData) -> bool:
        for key, rec in self.records.items():
            if rec.attendance_id == data.attendance_id and rec.check_out_time is None:
                self.records[key] = replace(
                    rec,
                    check_out_time=data.check_out_time,
                    check_out_latitude=data.latitude,
                    check_out_longitude=data.longitude,
                    check_out_location_id=data.location_id,
                    notes=data.notes,
                )
                return True
        return False

    def create_absent(self, *, student_id: int, attendance_date: date, notes=None) -> int:
        key = (student_id, attendance_date)
        if key in self.records:
            return 0
        attendance_id = self._next_id()
        self.records[key] = AttendanceRecord(
            attendance_id=attendance_id,
            student_id=student_id,
            attendance_date=attendance_date,
            status=AttendanceStatus.ABSENT,
            notes=notes,
        )
        return attendance_id

    def list_for_students(self, *, student_ids, start_date, end_date):
        wanted = set(student_ids)
        return [
            r
            for (sid, day), r in sorted(self.records.items(), key=lambda kv: (kv[0][1], kv[0][0]))
            if sid in wanted and start_date <= day <= end_date
        ]


class InMemoryPermits:
    def __init__(self, permits=()):
        self.permits = {p.permit_id: p for p in permits}

    def create(self, *, student_id, permit_type, reason, start_date, end_date) -> int:
        new_id = max(self.permits, default=0) + 1
        self.permits[new_id] = Permit(
            permit_id=new_id,
            student_id=student_id,
            permit_type=permit_type,
            reason=reason,
            start_date=start_date,
            end_date=end_date,
            status=PermitStatus.PENDING,
            created_at=datetime(2026, 2, 1, 9, 0, 0),
        )
        return new_id

    def get_by_id(self, permit_id: int) -> Optional[Permit]:
        return self.permits.get(int(permit_id))

    def list_for_student(self, student_id, *, limit):
        return [p for p in self.permits.values() if p.student_id == student_id][:limit]

    def list_pending(self, *, limit):
        return [p for p in self.permits.values() if p.status == PermitStatus.PENDING][:limit]

    def decide(self, *, permit_id, status, reviewed_by, reviewed_at, review_notes) -> bool:
        p = self.permits.get(int(permit_id))
        if p is None or p.status != PermitStatus.PENDING:
            return False
        self.permits[p.permit_id] = replace(
            p, status=status, reviewed_by=reviewed_by, reviewed_at=reviewed_at, review_notes=review_notes
        )
        return True

    def has_approved_permit(self, student_id, on_date) -> bool:
        return any(
            p.student_id == student_id and p.status == PermitStatus.APPROVED and p.covers(on_date)
            for p in self.permits.values()
        )

    def approved_student_ids(self, on_date):
        return {
            p.student_id
            for p in self.permits.values()
            if p.status == PermitStatus.APPROVED and p.covers(on_date)
        }


class InMemoryDiscipline:
    def __init__(self):
        self.violations: list[Violation] = []
        # (student_id, points, status)
        self.achievements: list[tuple[int, int, str]] = []

    def add_violation(self, *, student_id, violation_type, violation_date, point_deduction, description=None) -> int:
        new_id = len(self.violations) + 1
        self.violations.append(
            Violation(
                violation_id=new_id,
                student_id=student_id,
                violation_type=violation_type,
                violation_date=violation_date,
                point_deduction=point_deduction,
                description=description,
            )
        )
        return new_id

    def add_violation_once(self, *, student_id, violation_type, violation_date, point_deduction, description=None) -> int:
        for v in self.violations:
            if (v.student_id, v.violation_type, v.violation_date) == (student_id, violation_type, violation_date):
                return v.violation_id
        return self.add_violation(
            student_id=student_id,
            violation_type=violation_type,
            violation_date=violation_date,
            point_deduction=point_deduction,
            description=description,
        )

    def point_totals(self, student_id) -> PointTotals:
        active = [v for v in self.violations if v.student_id == student_id and v.status == "active"]
        verified = [a for a in self.achievements if a[0] == student_id and a[2] == "verified"]
        return PointTotals(
            violation_points=sum(v.point_deduction for v in active),
            violation_count=len(active),
            achievement_points=sum(a[1] for a in verified),
            achievement_count=len(verified),
        )

    def list_violations(self, student_id, *, limit):
        return [v for v in reversed(self.violations) if v.student_id == student_id][:limit]
