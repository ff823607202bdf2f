from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from ..attendance.repository import AttendanceRepository
from ..core.enums import AttendanceStatus, RecapStatus, Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..core.permissions import Capability, can
from ..students.repository import StudentRepository

RECAP_FIELDS = [
    "student_id",
    "nis",
    "full_name",
    "present_days",
    "late_days",
    "absent_days",
    "total_days",
    "attendance_rate",
    "status",
]


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: dict


def attendance_rate(present_days: int, total_days: int) -> int:
    """Whole percent, halves rounded up; 0 when there is nothing to count."""

    if total_days <= 0:
        return 0
    return int(math.floor(present_days * 100 / total_days + 0.5))


def classify_rate(rate: int) -> RecapStatus:
    if rate >= 95:
        return RecapStatus.EXCELLENT
    if rate >= 85:
        return RecapStatus.GOOD
    if rate >= 75:
        return RecapStatus.WARNING
    return RecapStatus.CRITICAL


class AttendanceReportService:
    def __init__(self, attendance: AttendanceRepository, students: StudentRepository):
        self._attendance = attendance
        self._students = students

    def build_class_recap(
        self,
        *,
        roles: Iterable[Role],
        start: date,
        end: date,
        class_id: Optional[int] = None,
    ) -> ReportData:
        if not can(roles, Capability.VIEW_ATTENDANCE_REPORTS):
            raise AuthorizationError("Anda tidak memiliki akses ke laporan presensi")
        if end < start:
            raise ValidationError("Tanggal akhir harus sama atau setelah tanggal awal")

        students = self._students.list_active(class_id=class_id)
        records = self._attendance.list_for_students(
            student_ids=[s.student_id for s in students], start_date=start, end_date=end
        )

        counts: dict[int, Counter] = {s.student_id: Counter() for s in students}
        for r in records:
            if r.student_id in counts:
                counts[r.student_id][r.status] += 1

        rows: list[dict] = []
        for s in students:
            c = counts[s.student_id]
            present = c[AttendanceStatus.PRESENT]
            late = c[AttendanceStatus.LATE]
            absent = c[AttendanceStatus.ABSENT]
            total = present + late + absent
            rate = attendance_rate(present, total)
            rows.append(
                {
                    "student_id": s.student_id,
                    "nis": s.nis,
                    "full_name": s.full_name,
                    "present_days": present,
                    "late_days": late,
                    "absent_days": absent,
                    "total_days": total,
                    "attendance_rate": rate,
                    "status": classify_rate(rate).value,
                }
            )

        by_status = Counter(row["status"] for row in rows)
        average = round(sum(row["attendance_rate"] for row in rows) / len(rows), 1) if rows else 0.0
        summary = {
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "class_id": class_id,
            "total_students": len(rows),
            "average_rate": average,
            "by_status": {status.value: by_status.get(status.value, 0) for status in RecapStatus},
        }
        return ReportData(rows=rows, summary=summary)
