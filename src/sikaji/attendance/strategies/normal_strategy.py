from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ...schedules.model import Schedule
from .base import AttendanceStrategy, StatusDecision

ON_TIME_NOTE = "Hadir tepat waktu"
REGULAR_DEPARTURE_NOTE = "Pulang sesuai jadwal"


class NormalStrategy(AttendanceStrategy):
    """On-time check-in, regular check-out."""

    def decide_checkin(self, *, now: datetime, schedule: Schedule) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT, note=ON_TIME_NOTE)

    def decide_checkout(self, *, now: datetime, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current, note=REGULAR_DEPARTURE_NOTE)
