from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..core.constants import LATE_CHECKOUT_CUTOFF
from ..schedules.model import Schedule
from .strategies.base import AttendanceStrategy
from .strategies.late_departure_strategy import LateDepartureStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


def is_late(now: datetime, schedule: Schedule) -> bool:
    """Late means strictly after the check-in window end."""

    return now.time() > schedule.check_in_end


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_checkin(self, *, now: datetime, schedule: Schedule) -> AttendanceStrategy:
        if is_late(now, schedule):
            return LateStrategy()
        return NormalStrategy()

    def for_checkout(self, *, now: datetime, has_approved_permit: bool) -> AttendanceStrategy:
        if now.time() > LATE_CHECKOUT_CUTOFF and not has_approved_permit:
            return LateDepartureStrategy()
        return NormalStrategy()
