from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import PermitStatus

PERMIT_TYPES = {
    "sakit": "Sakit",
    "izin_keluarga": "Izin Keluarga",
    "dispensasi_akademik": "Dispensasi Akademik",
    "kegiatan_eksternal": "Kegiatan di Luar Sekolah",
    "izin_pulang_awal": "Izin Pulang Awal",
    "kegiatan_setelah_jam_sekolah": "Kegiatan Setelah Jam Sekolah",
    "keperluan_administrasi": "Keperluan Administrasi",
    "lainnya": "Lainnya",
}


@dataclass(frozen=True)
class Permit:
    permit_id: int
    student_id: int
    permit_type: str
    reason: str
    start_date: date
    end_date: date
    status: PermitStatus
    created_at: datetime
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    review_notes: Optional[str] = None

    def covers(self, on_date: date) -> bool:
        return self.start_date <= on_date <= self.end_date

    def to_dict(self) -> dict:
        return {
            "permit_id": self.permit_id,
            "student_id": self.student_id,
            "permit_type": self.permit_type,
            "permit_type_label": PERMIT_TYPES.get(self.permit_type, self.permit_type),
            "reason": self.reason,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "status": self.status.value,
            "created_at": self.created_at.isoformat(timespec="seconds"),
            "reviewed_by": self.reviewed_by,
            "reviewed_at": self.reviewed_at.isoformat(timespec="seconds") if self.reviewed_at else None,
            "review_notes": self.review_notes,
        }


@dataclass(frozen=True)
class PermitVerification:
    permit_id: Optional[int]
    is_valid: bool
    message: str
    status: Optional[PermitStatus] = None
    nis: Optional[str] = None
    student_name: Optional[str] = None
    valid_from: Optional[date] = None
    valid_until: Optional[date] = None

    def to_dict(self) -> dict:
        return {
            "permit_id": self.permit_id,
            "is_valid": self.is_valid,
            "message": self.message,
            "status": self.status.value if self.status else None,
            "nis": self.nis,
            "student_name": self.student_name,
            "valid_from": self.valid_from.isoformat() if self.valid_from else None,
            "valid_until": self.valid_until.isoformat() if self.valid_until else None,
        }
