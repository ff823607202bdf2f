from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Location:
    location_id: int
    name: str
    latitude: float
    longitude: float
    radius_meters: int
    is_active: bool = True

    def to_dict(self) -> dict:
        return {
            "location_id": self.location_id,
            "name": self.name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "radius_meters": self.radius_meters,
            "is_active": self.is_active,
        }
