"""Geofence math for self-attendance."""

from __future__ import annotations

import math
from typing import Iterable, Optional

from ..core.constants import EARTH_RADIUS_METERS
from ..core.exceptions import ValidationError
from ..locations.model import Location


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in meters between two WGS84 points."""

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # Rounding can push a a hair above 1 for antipodal points.
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def validate_coordinates(latitude: float, longitude: float) -> None:
    if not isinstance(latitude, (int, float)) or not isinstance(longitude, (int, float)):
        raise ValidationError("Koordinat tidak valid")
    if math.isnan(latitude) or math.isnan(longitude):
        raise ValidationError("Koordinat tidak valid")
    if not -90 <= latitude <= 90:
        raise ValidationError("Latitude harus di antara -90 dan 90")
    if not -180 <= longitude <= 180:
        raise ValidationError("Longitude harus di antara -180 dan 180")


def find_matching_location(
    latitude: float, longitude: float, locations: Iterable[Location]
) -> Optional[Location]:
    """First active location whose radius contains the point, in the given order."""

    for location in locations:
        if not location.is_active:
            continue
        distance = haversine_distance(latitude, longitude, location.latitude, location.longitude)
        if distance <= location.radius_meters:
            return location
    return None
