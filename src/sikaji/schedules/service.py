from __future__ import annotations

from dataclasses import asdict
from datetime import time
from typing import Any, Iterable, Mapping, Sequence

from ..common.datetime_utils import parse_clock
from ..common.validators import require_non_empty, require_positive_int
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.permissions import Capability, can
from .model import Schedule, ScheduleInput
from .repository import ScheduleRepository


def _clock(value: Any, field_name: str) -> time:
    if isinstance(value, time):
        return value
    try:
        return parse_clock(str(value or ""))
    except ValueError:
        raise ValidationError(f"{field_name} harus berformat HH:MM atau HH:MM:SS")


def _day_of_week(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError("Hari harus berupa angka 0 (Minggu) sampai 6 (Sabtu)")
    try:
        day = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Hari harus berupa angka 0 (Minggu) sampai 6 (Sabtu)")
    if not 0 <= day <= 6:
        raise ValidationError("Hari harus berupa angka 0 (Minggu) sampai 6 (Sabtu)")
    return day


def parse_schedule_input(payload: Mapping[str, Any]) -> ScheduleInput:
    """Validate a schedule payload coming from the admin form."""

    name = require_non_empty(str(payload.get("name") or ""), "Nama jadwal")
    day = _day_of_week(payload.get("day_of_week"))

    check_in_start = _clock(payload.get("check_in_start"), "Jam mulai check-in")
    check_in_end = _clock(payload.get("check_in_end"), "Jam akhir check-in")
    check_out_start = _clock(payload.get("check_out_start"), "Jam mulai check-out")
    check_out_end = _clock(payload.get("check_out_end"), "Jam akhir check-out")

    if check_in_start >= check_in_end:
        raise ValidationError("Jam mulai check-in harus sebelum jam akhir check-in")
    if check_out_start >= check_out_end:
        raise ValidationError("Jam mulai check-out harus sebelum jam akhir check-out")

    raw_threshold = payload.get("late_threshold_minutes", 15)
    try:
        threshold = int(raw_threshold)
    except (TypeError, ValueError):
        raise ValidationError("Batas keterlambatan harus berupa angka")
    if threshold < 0:
        raise ValidationError("Batas keterlambatan tidak boleh negatif")

    applies_to_all = bool(payload.get("applies_to_all_classes", True))
    class_id = None
    if not applies_to_all:
        class_id = require_positive_int(payload.get("class_id"), "Kelas")

    return ScheduleInput(
        name=name,
        day_of_week=day,
        check_in_start=check_in_start,
        check_in_end=check_in_end,
        check_out_start=check_out_start,
        check_out_end=check_out_end,
        late_threshold_minutes=threshold,
        applies_to_all_classes=applies_to_all,
        class_id=class_id,
        is_active=bool(payload.get("is_active", True)),
    )


class ScheduleService:
    def __init__(self, schedules: ScheduleRepository):
        self._schedules = schedules

    @staticmethod
    def _ensure_allowed(roles: Iterable[Role]) -> None:
        if not can(roles, Capability.MANAGE_SCHEDULES):
            raise AuthorizationError("Anda tidak memiliki akses untuk mengelola jadwal")

    def list_schedules(self) -> Sequence[Schedule]:
        return self._schedules.list_all()

    def get(self, schedule_id: int) -> Schedule:
        schedule = self._schedules.get_by_id(int(schedule_id))
        if schedule is None:
            raise NotFoundError("Jadwal tidak ditemukan")
        return schedule

    def create(self, *, roles: Iterable[Role], payload: Mapping[str, Any]) -> int:
        self._ensure_allowed(roles)
        return self._schedules.create(parse_schedule_input(payload))

    def update(self, *, roles: Iterable[Role], schedule_id: int, payload: Mapping[str, Any]) -> Schedule:
        self._ensure_allowed(roles)
        current = self.get(schedule_id)
        data = parse_schedule_input(payload)
        self._schedules.update(current.schedule_id, data)
        return Schedule(schedule_id=current.schedule_id, **asdict(data))

    def delete(self, *, roles: Iterable[Role], schedule_id: int) -> None:
        self._ensure_allowed(roles)
        if not self._schedules.delete(int(schedule_id)):
            raise NotFoundError("Jadwal tidak ditemukan")
