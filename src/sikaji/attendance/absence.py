from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional

from ..common.datetime_utils import school_day_of_week
from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from ..core.permissions import Capability, can
from ..permits.repository import PermitRepository
from ..schedules.repository import ScheduleRepository
from ..students.repository import StudentRepository
from .model import AbsenceSummary
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

ABSENT_NOTE = "Tidak melakukan presensi (deteksi otomatis)"


class AbsenceDetectionService:
    """Marks students without any attendance for a school day as absent.

    Runs only when an authorized user triggers it.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        schedules: ScheduleRepository,
        permits: PermitRepository,
    ):
        self._attendance = attendance
        self._students = students
        self._schedules = schedules
        self._permits = permits

    def run(self, *, roles: Iterable[Role], target_date: date, class_id: Optional[int] = None) -> AbsenceSummary:
        if not can(roles, Capability.RUN_ABSENCE_DETECTION):
            raise AuthorizationError("Anda tidak memiliki akses untuk menjalankan deteksi ketidakhadiran")

        if target_date.weekday() >= 5:
            return AbsenceSummary(attendance_date=target_date, skipped=True, reason="Hari libur akhir pekan")

        day = school_day_of_week(target_date)
        students = self._students.list_active(class_id=class_id)
        if not students:
            return AbsenceSummary(attendance_date=target_date, skipped=False)
        excused_ids = self._permits.approved_student_ids(target_date)

        checked = recorded = excused = marked = 0
        has_any_schedule = False
        for student in students:
            if self._schedules.get_schedule_for_day(day, student.class_id) is None:
                continue
            has_any_schedule = True
            checked += 1

            if self._attendance.get_today_record(student.student_id, target_date) is not None:
                recorded += 1
                continue
            if student.student_id in excused_ids:
                excused += 1
                continue

            self._attendance.create_absent(
                student_id=student.student_id, attendance_date=target_date, notes=ABSENT_NOTE
            )
            marked += 1

        if not has_any_schedule:
            return AbsenceSummary(attendance_date=target_date, skipped=True, reason="Tidak ada jadwal presensi")

        logger.info(
            "Absence detection for %s: %d checked, %d absent, %d excused",
            target_date.isoformat(),
            checked,
            marked,
            excused,
        )
        return AbsenceSummary(
            attendance_date=target_date,
            skipped=False,
            students_checked=checked,
            already_recorded=recorded,
            excused=excused,
            marked_absent=marked,
        )
