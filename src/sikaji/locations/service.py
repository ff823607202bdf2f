from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence

from ..attendance.geo import validate_coordinates
from ..common.validators import require_float, require_non_empty, require_positive_int
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError
from ..core.permissions import Capability, can
from .model import Location
from .repository import LocationRepository


class LocationService:
    def __init__(self, locations: LocationRepository):
        self._locations = locations

    @staticmethod
    def _ensure_allowed(roles: Iterable[Role]) -> None:
        if not can(roles, Capability.MANAGE_LOCATIONS):
            raise AuthorizationError("Anda tidak memiliki akses untuk mengelola lokasi")

    @staticmethod
    def _clean(name: Any, latitude: Any, longitude: Any, radius_meters: Any) -> tuple[str, float, float, int]:
        name = require_non_empty(name if isinstance(name, str) else "", "Nama lokasi")
        lat = require_float(latitude, "Latitude")
        lng = require_float(longitude, "Longitude")
        validate_coordinates(lat, lng)
        radius = require_positive_int(radius_meters, "Radius")
        return name, lat, lng, radius

    def list_locations(self, *, active_only: bool = False) -> Sequence[Location]:
        if active_only:
            return self._locations.get_active_locations()
        return self._locations.list_all()

    def get(self, location_id: int) -> Location:
        location = self._locations.get_by_id(int(location_id))
        if location is None:
            raise NotFoundError("Lokasi tidak ditemukan")
        return location

    def create(self, *, roles: Iterable[Role], name: Any, latitude: Any, longitude: Any, radius_meters: Any) -> int:
        self._ensure_allowed(roles)
        name, lat, lng, radius = self._clean(name, latitude, longitude, radius_meters)
        return self._locations.create(name=name, latitude=lat, longitude=lng, radius_meters=radius)

    def update(
        self,
        *,
        roles: Iterable[Role],
        location_id: int,
        name: Any,
        latitude: Any,
        longitude: Any,
        radius_meters: Any,
        is_active: Optional[bool] = None,
    ) -> Location:
        self._ensure_allowed(roles)
        current = self.get(location_id)
        name, lat, lng, radius = self._clean(name, latitude, longitude, radius_meters)
        active = current.is_active if is_active is None else bool(is_active)

        self._locations.update(
            location_id=current.location_id,
            name=name,
            latitude=lat,
            longitude=lng,
            radius_meters=radius,
            is_active=active,
        )
        return Location(
            location_id=current.location_id,
            name=name,
            latitude=lat,
            longitude=lng,
            radius_meters=radius,
            is_active=active,
        )

    def deactivate(self, *, roles: Iterable[Role], location_id: int) -> None:
        self._ensure_allowed(roles)
        current = self.get(location_id)
        self._locations.set_active(location_id=current.location_id, is_active=False)
