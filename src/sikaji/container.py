from __future__ import annotations

from dataclasses import dataclass

from .attendance.absence import AbsenceDetectionService
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.security import AntiSpoofingValidator
from .attendance.service import SelfAttendanceService
from .database.connection import DatabaseConnection, DBConfig
from .discipline.mysql_discipline_repository import MySQLDisciplineRepository
from .discipline.repository import DisciplineRepository
from .discipline.service import DisciplineService
from .locations.mysql_location_repository import MySQLLocationRepository
from .locations.repository import LocationRepository
from .locations.service import LocationService
from .permits.mysql_permit_repository import MySQLPermitRepository
from .permits.repository import PermitRepository
from .permits.service import PermitService
from .reports.service import AttendanceReportService
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.repository import ScheduleRepository
from .schedules.service import ScheduleService
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    students_repo: StudentRepository
    locations_repo: LocationRepository
    schedules_repo: ScheduleRepository
    attendance_repo: AttendanceRepository
    permits_repo: PermitRepository
    discipline_repo: DisciplineRepository

    auth_service: AuthService
    location_service: LocationService
    schedule_service: ScheduleService
    discipline_service: DisciplineService
    permit_service: PermitService
    self_attendance_service: SelfAttendanceService
    absence_service: AbsenceDetectionService
    report_service: AttendanceReportService


def wire(
    *,
    users_repo: UserRepository,
    students_repo: StudentRepository,
    locations_repo: LocationRepository,
    schedules_repo: ScheduleRepository,
    attendance_repo: AttendanceRepository,
    permits_repo: PermitRepository,
    discipline_repo: DisciplineRepository,
    permit_verify_url: str,
) -> Container:
    """Build services on top of any set of repositories."""

    discipline_service = DisciplineService(discipline_repo, students_repo)
    self_attendance_service = SelfAttendanceService(
        attendance_repo,
        schedules_repo,
        locations_repo,
        permits_repo,
        discipline_service,
        validator=AntiSpoofingValidator(),
        strategy_factory=AttendanceStrategyFactory(),
    )

    return Container(
        users_repo=users_repo,
        students_repo=students_repo,
        locations_repo=locations_repo,
        schedules_repo=schedules_repo,
        attendance_repo=attendance_repo,
        permits_repo=permits_repo,
        discipline_repo=discipline_repo,
        auth_service=AuthService(users_repo),
        location_service=LocationService(locations_repo),
        schedule_service=ScheduleService(schedules_repo),
        discipline_service=discipline_service,
        permit_service=PermitService(permits_repo, students_repo, verify_url=permit_verify_url),
        self_attendance_service=self_attendance_service,
        absence_service=AbsenceDetectionService(attendance_repo, students_repo, schedules_repo, permits_repo),
        report_service=AttendanceReportService(attendance_repo, students_repo),
    )


def build_container(*, db_config: dict, permit_verify_url: str) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire(
        users_repo=MySQLUserRepository(conn),
        students_repo=MySQLStudentRepository(conn),
        locations_repo=MySQLLocationRepository(conn),
        schedules_repo=MySQLScheduleRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        permits_repo=MySQLPermitRepository(conn),
        discipline_repo=MySQLDisciplineRepository(conn),
        permit_verify_url=permit_verify_url,
    )
