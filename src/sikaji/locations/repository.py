from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Location


class LocationRepository(Protocol):
    def get_active_locations(self) -> Sequence[Location]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Location]:
        raise NotImplementedError

    def get_by_id(self, location_id: int) -> Optional[Location]:
        raise NotImplementedError

    def create(self, *, name: str, latitude: float, longitude: float, radius_meters: int) -> int:
        """Returns location_id."""

        raise NotImplementedError

    def update(
        self,
        *,
        location_id: int,
        name: str,
        latitude: float,
        longitude: float,
        radius_meters: int,
        is_active: bool,
    ) -> bool:
        raise NotImplementedError

    def set_active(self, *, location_id: int, is_active: bool) -> bool:
        raise NotImplementedError
