from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence, Set

from ..core.enums import PermitStatus
from .model import Permit


class PermitRepository(Protocol):
    def create(self, *, student_id: int, permit_type: str, reason: str, start_date: date, end_date: date) -> int:
        raise NotImplementedError

    def get_by_id(self, permit_id: int) -> Optional[Permit]:
        raise NotImplementedError

    def list_for_student(self, student_id: int, *, limit: int) -> Sequence[Permit]:
        raise NotImplementedError

    def list_pending(self, *, limit: int) -> Sequence[Permit]:
        raise NotImplementedError

    def decide(
        self,
        *,
        permit_id: int,
        status: PermitStatus,
        reviewed_by: int,
        reviewed_at: datetime,
        review_notes: Optional[str],
    ) -> bool:
        """Move a pending permit to a final status. False if it was not pending."""

        raise NotImplementedError

    def has_approved_permit(self, student_id: int, on_date: date) -> bool:
        raise NotImplementedError

    def approved_student_ids(self, on_date: date) -> Set[int]:
        raise NotImplementedError
