from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...schedules.model import Schedule


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    note: Optional[str] = None
    warning: Optional[str] = None


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide an attendance status."""

    @abstractmethod
    def decide_checkin(self, *, now: datetime, schedule: Schedule) -> StatusDecision:
        raise NotImplementedError

    @abstractmethod
    def decide_checkout(self, *, now: datetime, current: AttendanceStatus) -> StatusDecision:
        raise NotImplementedError
