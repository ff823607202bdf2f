from __future__ import annotations

from datetime import datetime, time
from typing import Iterable, Optional, Sequence

from ..core.constants import BASE_DISCIPLINE_SCORE, LATE_ARRIVAL_POINTS, LATE_ARRIVAL_VIOLATION
from ..core.enums import DisciplineStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError
from ..core.permissions import Capability, can
from ..students.repository import StudentRepository
from .model import DisciplineSummary, Violation
from .repository import DisciplineRepository


def classify_score(score: int) -> DisciplineStatus:
    if score >= 90:
        return DisciplineStatus.EXCELLENT
    if score >= 75:
        return DisciplineStatus.GOOD
    if score >= 60:
        return DisciplineStatus.WARNING
    if score >= 40:
        return DisciplineStatus.PROBATION
    return DisciplineStatus.CRITICAL


class DisciplineService:
    def __init__(self, discipline: DisciplineRepository, students: StudentRepository):
        self._discipline = discipline
        self._students = students

    def summary(self, student_id: int) -> DisciplineSummary:
        totals = self._discipline.point_totals(int(student_id))
        score = BASE_DISCIPLINE_SCORE - totals.violation_points + totals.achievement_points
        return DisciplineSummary(
            student_id=int(student_id),
            total_violation_points=totals.violation_points,
            total_achievement_points=totals.achievement_points,
            violation_count=totals.violation_count,
            achievement_count=totals.achievement_count,
            final_score=score,
            discipline_status=classify_score(score),
        )

    def summary_for_viewer(
        self, *, roles: Iterable[Role], user_id: int, student_id: int
    ) -> tuple[DisciplineSummary, Sequence[Violation]]:
        """Summary plus recent violations, for staff, the student, or the student's parent."""

        roles = list(roles)
        student = self._students.get_by_id(int(student_id))
        if student is None:
            raise NotFoundError("Siswa tidak ditemukan")

        allowed = (
            can(roles, Capability.VIEW_ALL_DISCIPLINE)
            or (student.user_id is not None and student.user_id == int(user_id))
            or (
                can(roles, Capability.VIEW_CHILD_DISCIPLINE)
                and student.parent_user_id is not None
                and student.parent_user_id == int(user_id)
            )
        )
        if not allowed:
            raise AuthorizationError("Anda tidak memiliki akses ke data siswa ini")

        return self.summary(student.student_id), self._discipline.list_violations(student.student_id, limit=20)

    def record_late_arrival(
        self, *, student_id: int, at: datetime, check_in_end: time, description: Optional[str] = None
    ) -> int:
        """At most one late-arrival violation per student per day."""

        return self._discipline.add_violation_once(
            student_id=int(student_id),
            violation_type=LATE_ARRIVAL_VIOLATION,
            violation_date=at.date(),
            point_deduction=LATE_ARRIVAL_POINTS,
            description=description
            or (
                f"Terlambat datang ke sekolah (hadir jam {at.strftime('%H:%M:%S')}, "
                f"batas {check_in_end.strftime('%H:%M:%S')})"
            ),
        )
