from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional


@dataclass(frozen=True)
class Schedule:
    """Weekly attendance window. day_of_week: 0 = Sunday ... 6 = Saturday."""

    schedule_id: int
    name: str
    day_of_week: int
    check_in_start: time
    check_in_end: time
    check_out_start: time
    check_out_end: time
    late_threshold_minutes: int = 15
    applies_to_all_classes: bool = True
    class_id: Optional[int] = None
    is_active: bool = True

    def to_dict(self) -> dict:
        return {
            "schedule_id": self.schedule_id,
            "name": self.name,
            "day_of_week": self.day_of_week,
            "check_in_start": self.check_in_start.strftime("%H:%M:%S"),
            "check_in_end": self.check_in_end.strftime("%H:%M:%S"),
            "check_out_start": self.check_out_start.strftime("%H:%M:%S"),
            "check_out_end": self.check_out_end.strftime("%H:%M:%S"),
            "late_threshold_minutes": self.late_threshold_minutes,
            "applies_to_all_classes": self.applies_to_all_classes,
            "class_id": self.class_id,
            "is_active": self.is_active,
        }


@dataclass(frozen=True)
class ScheduleInput:
    name: str
    day_of_week: int
    check_in_start: time
    check_in_end: time
    check_out_start: time
    check_out_end: time
    late_threshold_minutes: int
    applies_to_all_classes: bool
    class_id: Optional[int]
    is_active: bool = True
