from __future__ import annotations

from datetime import datetime

from ...common.datetime_utils import minutes_between
from ...core.enums import AttendanceStatus
from ...schedules.model import Schedule
from .base import AttendanceStrategy, StatusDecision
from .normal_strategy import REGULAR_DEPARTURE_NOTE


class LateStrategy(AttendanceStrategy):
    """Check-in after the schedule's check-in window closed."""

    def decide_checkin(self, *, now: datetime, schedule: Schedule) -> StatusDecision:
        minutes = minutes_between(schedule.check_in_end, now.time())
        return StatusDecision(status=AttendanceStatus.LATE, note=f"Anda terlambat {minutes} menit")

    def decide_checkout(self, *, now: datetime, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current, note=REGULAR_DEPARTURE_NOTE)
