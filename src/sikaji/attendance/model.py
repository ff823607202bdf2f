from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import List, Optional

from ..core.enums import AttendanceStatus
from ..locations.model import Location
from ..schedules.model import Schedule


def _clock(value: Optional[time]) -> Optional[str]:
    return value.strftime("%H:%M:%S") if value else None


@dataclass(frozen=True)
class AttendanceRecord:
    """One student's self-attendance for one date."""

    attendance_id: int
    student_id: int
    attendance_date: date
    status: AttendanceStatus
    check_in_time: Optional[time] = None
    check_in_latitude: Optional[float] = None
    check_in_longitude: Optional[float] = None
    check_in_location_id: Optional[int] = None
    check_out_time: Optional[time] = None
    check_out_latitude: Optional[float] = None
    check_out_longitude: Optional[float] = None
    check_out_location_id: Optional[int] = None
    notes: Optional[str] = None
    device_fingerprint: Optional[str] = None
    violation_created: bool = False

    @property
    def has_checked_in(self) -> bool:
        return self.check_in_time is not None

    @property
    def has_checked_out(self) -> bool:
        return self.check_out_time is not None

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "student_id": self.student_id,
            "attendance_date": self.attendance_date.isoformat(),
            "status": self.status.value,
            "check_in_time": _clock(self.check_in_time),
            "check_in_latitude": self.check_in_latitude,
            "check_in_longitude": self.check_in_longitude,
            "check_in_location_id": self.check_in_location_id,
            "check_out_time": _clock(self.check_out_time),
            "check_out_latitude": self.check_out_latitude,
            "check_out_longitude": self.check_out_longitude,
            "check_out_location_id": self.check_out_location_id,
            "notes": self.notes,
            "violation_created": self.violation_created,
        }


@dataclass(frozen=True)
class CheckInData:
    """Values written by the check-in upsert."""

    student_id: int
    attendance_date: date
    check_in_time: time
    latitude: float
    longitude: float
    location_id: int
    status: AttendanceStatus
    notes: Optional[str]
    device_fingerprint: Optional[str]
    violation_created: bool


@dataclass(frozen=True)
class CheckOutData:
    attendance_id: int
    check_out_time: time
    latitude: float
    longitude: float
    location_id: Optional[int]
    notes: Optional[str]


@dataclass(frozen=True)
class AttendanceState:
    """What the self-attendance widget needs to render today's buttons."""

    attendance_date: date
    schedule: Optional[Schedule]
    record: Optional[AttendanceRecord]
    can_check_in: bool
    can_check_out: bool
    is_late: bool
    geolocation_options: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "attendance_date": self.attendance_date.isoformat(),
            "schedule": self.schedule.to_dict() if self.schedule else None,
            "record": self.record.to_dict() if self.record else None,
            "can_check_in": self.can_check_in,
            "can_check_out": self.can_check_out,
            "is_late": self.is_late,
            "geolocation_options": dict(self.geolocation_options),
        }


@dataclass(frozen=True)
class CheckInResult:
    status: AttendanceStatus
    location: Location
    confidence: int
    violation_created: bool
    notes: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "location": self.location.to_dict(),
            "confidence": self.confidence,
            "violation_created": self.violation_created,
            "notes": self.notes,
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class CheckOutResult:
    status: AttendanceStatus
    location: Optional[Location]
    confidence: int
    notes: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "location": self.location.to_dict() if self.location else None,
            "confidence": self.confidence,
            "notes": self.notes,
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class AbsenceSummary:
    attendance_date: date
    skipped: bool
    reason: Optional[str] = None
    students_checked: int = 0
    already_recorded: int = 0
    excused: int = 0
    marked_absent: int = 0

    def to_dict(self) -> dict:
        return {
            "attendance_date": self.attendance_date.isoformat(),
            "skipped": self.skipped,
            "reason": self.reason,
            "students_checked": self.students_checked,
            "already_recorded": self.already_recorded,
            "excused": self.excused,
            "marked_absent": self.marked_absent,
        }
