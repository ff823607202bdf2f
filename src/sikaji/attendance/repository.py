from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, CheckInData, CheckOutData


class AttendanceRepository(Protocol):
    def get_today_record(self, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def upsert_check_in(self, data: CheckInData) -> int:
        """Insert or overwrite the (student, date) row. Returns attendance_id."""

        raise NotImplementedError

    def update_check_out(self, data: CheckOutData) -> bool:
        raise NotImplementedError

    def create_absent(self, *, student_id: int, attendance_date: date, notes: Optional[str] = None) -> int:
        raise NotImplementedError

    def list_for_students(
        self, *, student_ids: Sequence[int], start_date: date, end_date: date
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
