from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import PointTotals, Violation


class DisciplineRepository(Protocol):
    def add_violation(
        self,
        *,
        student_id: int,
        violation_type: str,
        violation_date: date,
        point_deduction: int,
        description: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def add_violation_once(
        self,
        *,
        student_id: int,
        violation_type: str,
        violation_date: date,
        point_deduction: int,
        description: Optional[str] = None,
    ) -> int:
        """Like add_violation, but returns the existing id when the student
        already has a violation of this type on this date."""

        raise NotImplementedError

    def point_totals(self, student_id: int) -> PointTotals:
        """Active violations and verified achievements only."""

        raise NotImplementedError

    def list_violations(self, student_id: int, *, limit: int) -> Sequence[Violation]:
        raise NotImplementedError
