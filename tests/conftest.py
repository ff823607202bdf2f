from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time

import pytest
from werkzeug.security import generate_password_hash

from fakes import (
    InMemoryAttendance,
    InMemoryDiscipline,
    InMemoryLocations,
    InMemoryPermits,
    InMemorySchedules,
    InMemoryStudents,
    InMemoryUsers,
)
from sikaji.container import Container, wire
from sikaji.core.enums import Role
from sikaji.locations.model import Location
from sikaji.schedules.model import Schedule
from sikaji.students.model import Student
from sikaji.users.model import User


@dataclass
class Repos:
    users: InMemoryUsers
    students: InMemoryStudents
    locations: InMemoryLocations
    schedules: InMemorySchedules
    attendance: InMemoryAttendance
    permits: InMemoryPermits
    discipline: InMemoryDiscipline


@pytest.fixture
def fixed_now() -> datetime:
    # Monday
    return datetime(2026, 2, 2, 7, 0, 0)


@pytest.fixture
def main_gate() -> Location:
    return Location(location_id=1, name="Main Gate", latitude=-6.9000, longitude=110.2000, radius_meters=50)


@pytest.fixture
def regular_schedule() -> Schedule:
    return Schedule(
        schedule_id=1,
        name="Reguler Senin",
        day_of_week=1,
        check_in_start=time(6, 30),
        check_in_end=time(7, 30),
        check_out_start=time(15, 15),
        check_out_end=time(17, 15),
        late_threshold_minutes=15,
    )


@pytest.fixture
def student() -> Student:
    return Student(
        student_id=10,
        user_id=100,
        full_name="Andi Pratama",
        nis="2024001",
        class_id=1,
        parent_user_id=200,
    )


@pytest.fixture
def users() -> InMemoryUsers:
    return InMemoryUsers(
        [
            User(1, "Admin Kesiswaan", "admin@sikaji.test", generate_password_hash("admin123"), (Role.ADMIN,)),
            User(2, "Bu Ratna", "walikelas@sikaji.test", generate_password_hash("guru123"), (Role.TEACHER, Role.HOMEROOM_TEACHER)),
            User(100, "Andi Pratama", "andi@sikaji.test", generate_password_hash("siswa123"), (Role.STUDENT,)),
            User(200, "Pak Budi", "ortu@sikaji.test", generate_password_hash("ortu123"), (Role.PARENT,)),
        ]
    )


@pytest.fixture
def repos(users, student, main_gate, regular_schedule) -> Repos:
    return Repos(
        users=users,
        students=InMemoryStudents([student]),
        locations=InMemoryLocations([main_gate]),
        schedules=InMemorySchedules([regular_schedule]),
        attendance=InMemoryAttendance(),
        permits=InMemoryPermits(),
        discipline=InMemoryDiscipline(),
    )


@pytest.fixture
def container(repos: Repos) -> Container:
    return wire(
        users_repo=repos.users,
        students_repo=repos.students,
        locations_repo=repos.locations,
        schedules_repo=repos.schedules,
        attendance_repo=repos.attendance,
        permits_repo=repos.permits,
        discipline_repo=repos.discipline,
        permit_verify_url="http://testserver/permits/verify",
    )
