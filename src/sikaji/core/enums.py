from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Peran pengguna. Nilai sama dengan yang disimpan di tabel user_roles."""

    ADMIN = "admin"
    PRINCIPAL = "kepala_sekolah"
    VICE_PRINCIPAL = "waka_kesiswaan"
    STUDENT_AFFAIRS_ADMIN = "admin_kesiswaan"
    DISCIPLINE_TEAM = "tppk"
    HOMEROOM_TEACHER = "wali_kelas"
    COUNSELOR = "guru_bk"
    EXTRACURRICULAR_COORDINATOR = "koordinator_ekstrakurikuler"
    EXTRACURRICULAR_COACH = "pelatih_ekstrakurikuler"
    TEACHER = "guru"
    STUDENT = "siswa"
    PARENT = "orang_tua"


class AttendanceStatus(str, Enum):
    """Status presensi mandiri yang disimpan di basis data."""

    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"


class PermitStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class DisciplineStatus(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    WARNING = "warning"
    PROBATION = "probation"
    CRITICAL = "critical"


class RecapStatus(str, Enum):
    """Klasifikasi tingkat kehadiran pada rekap kelas."""

    EXCELLENT = "excellent"
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"
