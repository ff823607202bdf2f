"""Turn the browser's geolocation result into a PositionSample."""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Mapping

from ..common.validators import require_float
from ..core.exceptions import LocationUnavailableError, ValidationError
from .geo import validate_coordinates
from .security import PositionSample

# GeolocationPositionError.code
_POSITION_ERRORS = {
    1: "Izin lokasi ditolak. Aktifkan akses lokasi pada browser Anda",
    2: "Lokasi tidak tersedia. Pastikan GPS perangkat aktif",
    3: "Waktu permintaan lokasi habis. Silakan coba lagi",
}
_UNSUPPORTED = "Perangkat atau browser tidak mendukung geolocation"


def position_sample_from_payload(data: Mapping[str, Any], *, received_at: datetime) -> PositionSample:
    """Build a sample from ``{latitude, longitude, accuracy}``.

    The sample is stamped with the server clock, not the browser's. A payload
    carrying ``error_code`` means the browser never produced a position.
    """

    if data.get("error_code") is not None:
        try:
            code = int(data["error_code"])
        except (TypeError, ValueError):
            code = 0
        raise LocationUnavailableError(_POSITION_ERRORS.get(code, _UNSUPPORTED))

    if data.get("latitude") is None or data.get("longitude") is None:
        raise LocationUnavailableError(_POSITION_ERRORS[2])

    latitude = require_float(data.get("latitude"), "Latitude")
    longitude = require_float(data.get("longitude"), "Longitude")
    validate_coordinates(latitude, longitude)
    accuracy = require_float(data.get("accuracy"), "Akurasi")
    if not math.isfinite(accuracy) or accuracy < 0:
        raise ValidationError("Akurasi tidak valid")

    return PositionSample(latitude=latitude, longitude=longitude, accuracy=accuracy, timestamp=received_at)
