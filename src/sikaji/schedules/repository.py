from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Schedule, ScheduleInput


class ScheduleRepository(Protocol):
    def get_schedule_for_day(self, day_of_week: int, class_id: Optional[int] = None) -> Optional[Schedule]:
        """Active schedule for the day.

        A schedule scoped to ``class_id`` wins over an all-classes one;
        among equals the newest row wins.
        """

        raise NotImplementedError

    def list_all(self) -> Sequence[Schedule]:
        raise NotImplementedError

    def get_by_id(self, schedule_id: int) -> Optional[Schedule]:
        raise NotImplementedError

    def create(self, data: ScheduleInput) -> int:
        raise NotImplementedError

    def update(self, schedule_id: int, data: ScheduleInput) -> bool:
        raise NotImplementedError

    def delete(self, schedule_id: int) -> bool:
        raise NotImplementedError
