from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import now_local, school_day_of_week
from ..core.constants import GEOLOCATION_OPTIONS, LATE_CHECKOUT_CUTOFF
from ..core.enums import AttendanceStatus
from ..core.exceptions import (
    OutsideGeofenceError,
    ScheduleMissingError,
    SpoofedLocationError,
    ValidationError,
)
from ..discipline.service import DisciplineService
from ..locations.repository import LocationRepository
from ..permits.repository import PermitRepository
from ..schedules.model import Schedule
from ..schedules.repository import ScheduleRepository
from ..students.model import Student
from .factory import AttendanceStrategyFactory, is_late
from .fingerprint import DeviceInfo, generate_device_fingerprint
from .geo import find_matching_location
from .model import AttendanceState, CheckInData, CheckInResult, CheckOutData, CheckOutResult
from .repository import AttendanceRepository
from .security import AntiSpoofingValidator, LocationHistory, LocationValidation, PositionSample

logger = logging.getLogger(__name__)


def append_note(existing: Optional[str], note: Optional[str]) -> Optional[str]:
    if not note:
        return existing
    if not existing:
        return note
    return f"{existing}; {note}"


class SelfAttendanceService:
    """Student self check-in / check-out against school geofences."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        schedules: ScheduleRepository,
        locations: LocationRepository,
        permits: PermitRepository,
        discipline: DisciplineService,
        *,
        validator: AntiSpoofingValidator | None = None,
        strategy_factory: AttendanceStrategyFactory | None = None,
    ):
        self._attendance = attendance
        self._schedules = schedules
        self._locations = locations
        self._permits = permits
        self._discipline = discipline
        self._validator = validator or AntiSpoofingValidator()
        self._factory = strategy_factory or AttendanceStrategyFactory()

    def _schedule_for(self, student: Student, now: datetime) -> Optional[Schedule]:
        return self._schedules.get_schedule_for_day(school_day_of_week(now.date()), student.class_id)

    def _validate_position(self, sample: PositionSample, history: LocationHistory) -> LocationValidation:
        validation = self._validator.validate(sample, history)
        if not validation.is_valid:
            raise SpoofedLocationError(
                "Lokasi terdeteksi tidak valid, presensi ditolak",
                confidence=validation.confidence,
                warnings=validation.warnings,
            )
        return validation

    def get_today_state(self, student: Student, *, now: Optional[datetime] = None) -> AttendanceState:
        now = now or now_local()
        today = now.date()

        schedule = self._schedule_for(student, now)
        record = self._attendance.get_today_record(student.student_id, today)
        checked_in = record is not None and record.has_checked_in

        return AttendanceState(
            attendance_date=today,
            schedule=schedule,
            record=record,
            can_check_in=schedule is not None and not checked_in,
            can_check_out=checked_in and not record.has_checked_out,
            is_late=schedule is not None and is_late(now, schedule),
            geolocation_options=dict(GEOLOCATION_OPTIONS),
        )

    def check_in(
        self,
        student: Student,
        sample: PositionSample,
        history: LocationHistory,
        device: Optional[DeviceInfo] = None,
        *,
        now: Optional[datetime] = None,
    ) -> CheckInResult:
        now = now or now_local()
        today = now.date()

        schedule = self._schedule_for(student, now)
        if schedule is None:
            raise ScheduleMissingError("Tidak ada jadwal presensi untuk hari ini")

        existing = self._attendance.get_today_record(student.student_id, today)
        if existing and existing.has_checked_in:
            raise ValidationError("Anda sudah melakukan check in hari ini")

        validation = self._validate_position(sample, history)

        location = find_matching_location(sample.latitude, sample.longitude, self._locations.get_active_locations())
        if location is None:
            raise OutsideGeofenceError("Anda harus berada di dalam area sekolah untuk melakukan presensi")

        strategy = self._factory.for_checkin(now=now, schedule=schedule)
        decision = strategy.decide_checkin(now=now, schedule=schedule)
        is_late_arrival = decision.status == AttendanceStatus.LATE

        fingerprint = generate_device_fingerprint(device, now) if device is not None else None

        self._attendance.upsert_check_in(
            CheckInData(
                student_id=student.student_id,
                attendance_date=today,
                check_in_time=now.time().replace(microsecond=0),
                latitude=sample.latitude,
                longitude=sample.longitude,
                location_id=location.location_id,
                status=decision.status,
                notes=decision.note,
                device_fingerprint=fingerprint,
                violation_created=is_late_arrival,
            )
        )
        # written after the row is stored; a retry reuses the same violation
        if is_late_arrival:
            self._discipline.record_late_arrival(
                student_id=student.student_id, at=now, check_in_end=schedule.check_in_end
            )
        logger.info(
            "Student %s checked in at %s as %s (confidence=%s)",
            student.student_id,
            location.name,
            decision.status.value,
            validation.confidence,
        )

        return CheckInResult(
            status=decision.status,
            location=location,
            confidence=validation.confidence,
            violation_created=is_late_arrival,
            notes=decision.note,
            warnings=list(validation.warnings),
        )

    def check_out(
        self,
        student: Student,
        sample: PositionSample,
        history: LocationHistory,
        *,
        now: Optional[datetime] = None,
    ) -> CheckOutResult:
        now = now or now_local()
        today = now.date()

        record = self._attendance.get_today_record(student.student_id, today)
        if record is None or not record.has_checked_in:
            raise ValidationError("Anda belum melakukan check in hari ini")
        if record.has_checked_out:
            raise ValidationError("Anda sudah melakukan check out hari ini")

        check_out_time = now.time().replace(microsecond=0)
        if check_out_time < record.check_in_time:
            raise ValidationError("Waktu check out tidak boleh sebelum waktu check in")

        validation = self._validate_position(sample, history)

        # Check-out records where it happened but does not require the geofence.
        location = find_matching_location(sample.latitude, sample.longitude, self._locations.get_active_locations())

        after_cutoff = now.time() > LATE_CHECKOUT_CUTOFF
        has_permit = after_cutoff and self._permits.has_approved_permit(student.student_id, today)

        strategy = self._factory.for_checkout(now=now, has_approved_permit=has_permit)
        decision = strategy.decide_checkout(now=now, current=record.status)
        notes = append_note(record.notes, decision.note)

        updated = self._attendance.update_check_out(
            CheckOutData(
                attendance_id=record.attendance_id,
                check_out_time=check_out_time,
                latitude=sample.latitude,
                longitude=sample.longitude,
                location_id=location.location_id if location else None,
                notes=notes,
            )
        )
        if not updated:
            raise ValidationError("Anda sudah melakukan check out hari ini")

        warnings = list(validation.warnings)
        if decision.warning:
            warnings.append(decision.warning)
            logger.info("Student %s checked out after cutoff without permit", student.student_id)

        return CheckOutResult(
            status=decision.status,
            location=location,
            confidence=validation.confidence,
            notes=notes,
            warnings=warnings,
        )
