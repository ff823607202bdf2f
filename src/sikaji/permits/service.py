from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Iterable, Optional, Sequence

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_PERMIT_LIST_LIMIT
from ..core.enums import PermitStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.permissions import Capability, can
from ..students.repository import StudentRepository
from .model import PERMIT_TYPES, Permit, PermitVerification
from .qr import build_qr_payload, parse_qr_payload, render_qr_png
from .repository import PermitRepository

logger = logging.getLogger(__name__)


def _as_date(value: Any, field_name: str) -> date:
    if isinstance(value, date):
        return value
    try:
        return parse_iso_date(str(value or "").strip())
    except ValueError:
        raise ValidationError(f"{field_name} harus berformat YYYY-MM-DD")


class PermitService:
    def __init__(self, permits: PermitRepository, students: StudentRepository, *, verify_url: str):
        self._permits = permits
        self._students = students
        self._verify_url = verify_url

    def _get(self, permit_id: int) -> Permit:
        permit = self._permits.get_by_id(int(permit_id))
        if permit is None:
            raise NotFoundError("Izin tidak ditemukan")
        return permit

    def _student_for_user(self, user_id: int):
        student = self._students.get_by_user_id(int(user_id))
        if student is None:
            raise NotFoundError("Data siswa untuk akun ini tidak ditemukan")
        return student

    def submit(
        self,
        *,
        roles: Iterable[Role],
        user_id: int,
        permit_type: Any,
        reason: Any,
        start_date: Any,
        end_date: Any,
    ) -> int:
        if not can(roles, Capability.SUBMIT_PERMIT):
            raise AuthorizationError("Hanya siswa yang dapat mengajukan izin")

        student = self._student_for_user(user_id)

        permit_type = str(permit_type or "").strip()
        if permit_type not in PERMIT_TYPES:
            raise ValidationError("Jenis izin tidak valid")
        reason = require_non_empty(str(reason or ""), "Alasan")

        start = _as_date(start_date, "Tanggal mulai")
        end = _as_date(end_date, "Tanggal selesai")
        if end < start:
            raise ValidationError("Tanggal selesai harus sama atau setelah tanggal mulai")

        permit_id = self._permits.create(
            student_id=student.student_id,
            permit_type=permit_type,
            reason=reason,
            start_date=start,
            end_date=end,
        )
        logger.info("Permit %s submitted by student %s", permit_id, student.student_id)
        return permit_id

    def list_mine(self, *, user_id: int, limit: int = DEFAULT_PERMIT_LIST_LIMIT) -> Sequence[Permit]:
        student = self._student_for_user(user_id)
        return self._permits.list_for_student(student.student_id, limit=limit)

    def list_pending(self, *, roles: Iterable[Role], limit: int = DEFAULT_PERMIT_LIST_LIMIT) -> Sequence[Permit]:
        if not can(roles, Capability.DECIDE_PERMIT):
            raise AuthorizationError("Anda tidak memiliki akses untuk meninjau izin")
        return self._permits.list_pending(limit=limit)

    def _decide(
        self,
        *,
        roles: Iterable[Role],
        reviewer_id: int,
        permit_id: int,
        status: PermitStatus,
        review_notes: str,
        now: Optional[datetime],
    ) -> None:
        if not can(roles, Capability.DECIDE_PERMIT):
            raise AuthorizationError("Anda tidak memiliki akses untuk meninjau izin")

        permit = self._get(permit_id)
        if permit.status != PermitStatus.PENDING:
            raise ValidationError("Izin ini sudah diproses")

        ok = self._permits.decide(
            permit_id=permit.permit_id,
            status=status,
            reviewed_by=int(reviewer_id),
            reviewed_at=now or now_local(),
            review_notes=(review_notes or "").strip() or None,
        )
        if not ok:
            raise ValidationError("Izin ini sudah diproses")
        logger.info("Permit %s %s by user %s", permit.permit_id, status.value, reviewer_id)

    def approve(
        self,
        *,
        roles: Iterable[Role],
        reviewer_id: int,
        permit_id: int,
        review_notes: str = "",
        now: Optional[datetime] = None,
    ) -> None:
        self._decide(
            roles=roles,
            reviewer_id=reviewer_id,
            permit_id=permit_id,
            status=PermitStatus.APPROVED,
            review_notes=review_notes,
            now=now,
        )

    def reject(
        self,
        *,
        roles: Iterable[Role],
        reviewer_id: int,
        permit_id: int,
        review_notes: str = "",
        now: Optional[datetime] = None,
    ) -> None:
        if not (review_notes or "").strip():
            raise ValidationError("Alasan penolakan wajib diisi")
        self._decide(
            roles=roles,
            reviewer_id=reviewer_id,
            permit_id=permit_id,
            status=PermitStatus.REJECTED,
            review_notes=review_notes,
            now=now,
        )

    def qr_png(self, *, roles: Iterable[Role], user_id: int, permit_id: int, now: Optional[datetime] = None) -> bytes:
        roles = list(roles)
        permit = self._get(permit_id)
        student = self._students.get_by_id(permit.student_id)
        if student is None:
            raise NotFoundError("Data siswa untuk izin ini tidak ditemukan")

        is_owner = student.user_id is not None and student.user_id == int(user_id)
        if not is_owner and not can(roles, Capability.DECIDE_PERMIT):
            raise AuthorizationError("Anda tidak memiliki akses ke izin ini")
        if permit.status != PermitStatus.APPROVED:
            raise ValidationError("QR code hanya tersedia untuk izin yang sudah disetujui")

        payload = build_qr_payload(permit, nis=student.nis, verify_url=self._verify_url, now=now or now_local())
        return render_qr_png(payload)

    def verify(self, *, roles: Iterable[Role], qr_text: str, on_date: Optional[date] = None) -> PermitVerification:
        if not can(roles, Capability.VERIFY_PERMIT):
            raise AuthorizationError("Anda tidak memiliki akses untuk memverifikasi izin")

        data = parse_qr_payload(qr_text)
        on_date = on_date or now_local().date()

        permit = self._permits.get_by_id(data["id"])
        if permit is None:
            return PermitVerification(permit_id=data["id"], is_valid=False, message="Izin tidak ditemukan")

        student = self._students.get_by_id(permit.student_id)
        nis = student.nis if student else None
        base = dict(
            permit_id=permit.permit_id,
            status=permit.status,
            nis=nis,
            student_name=student.full_name if student else None,
            valid_from=permit.start_date,
            valid_until=permit.end_date,
        )

        if nis is None or str(data["nis"]) != nis:
            return PermitVerification(is_valid=False, message="Data QR tidak cocok dengan data izin", **base)
        if permit.status != PermitStatus.APPROVED:
            return PermitVerification(is_valid=False, message="Izin belum disetujui", **base)
        if not permit.covers(on_date):
            return PermitVerification(is_valid=False, message="Izin tidak berlaku pada tanggal ini", **base)
        return PermitVerification(is_valid=True, message="Izin valid", **base)
