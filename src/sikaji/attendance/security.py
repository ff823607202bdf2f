"""Anti-spoofing heuristic for browser-reported positions.

The score is advisory: it catches the obvious mock-location apps and
replayed coordinates, it does not authenticate the device.
"""

from __future__ import annotations

import logging
import math
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Deque, Iterator, List, Optional, Sequence

from ..core.constants import (
    ACCURACY_PENALTY,
    ATTEMPT_WINDOW_SECONDS,
    EXCESS_ZEROS_MARKER,
    FAKE_COORDINATE_RADIUS_METERS,
    FAKE_PATTERN_PENALTY,
    FAKE_REFERENCE_COORDINATES,
    INITIAL_CONFIDENCE,
    LOCATION_HISTORY_CAPACITY,
    MAX_ATTEMPTS_PER_HOUR,
    MAX_PLAUSIBLE_SPEED_MPS,
    MIN_SECONDS_BETWEEN_ATTEMPTS,
    MIN_VALID_CONFIDENCE,
    SUSPICIOUS_ACCURACY_METERS,
    TELEPORT_PENALTY,
)
from ..core.exceptions import TooManyAttemptsError
from .geo import haversine_distance

logger = logging.getLogger(__name__)

WARNING_ACCURACY = "Akurasi GPS terlalu tinggi (kemungkinan fake GPS)"
WARNING_TELEPORT = "Perpindahan lokasi tidak wajar (teleportasi)"
WARNING_PATTERN = "Pola lokasi mencurigakan terdeteksi"


@dataclass(frozen=True)
class PositionSample:
    latitude: float
    longitude: float
    accuracy: float
    timestamp: datetime

    def to_dict(self) -> dict:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "accuracy": self.accuracy,
            "timestamp": self.timestamp.timestamp(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PositionSample":
        return cls(
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            accuracy=float(data["accuracy"]),
            timestamp=datetime.fromtimestamp(float(data["timestamp"])),
        )


class LocationHistory:
    """Bounded ring buffer of the most recent position samples.

    One instance belongs to one validator session (the web layer keeps it in
    the Flask session) and is handed to every validation call.
    """

    def __init__(self, capacity: int = LOCATION_HISTORY_CAPACITY, samples: Sequence[PositionSample] = ()):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._samples: Deque[PositionSample] = deque(samples, maxlen=capacity)

    def append(self, sample: PositionSample) -> None:
        self._samples.append(sample)

    def last(self) -> Optional[PositionSample]:
        return self._samples[-1] if self._samples else None

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[PositionSample]:
        return iter(self._samples)

    def to_list(self) -> List[dict]:
        return [s.to_dict() for s in self._samples]

    @classmethod
    def from_list(cls, items, capacity: int = LOCATION_HISTORY_CAPACITY) -> "LocationHistory":
        samples = []
        for item in items or []:
            try:
                samples.append(PositionSample.from_dict(item))
            except (KeyError, TypeError, ValueError):
                logger.warning("Dropping malformed location history entry: %r", item)
        return cls(capacity, samples)


class AttemptTracker:
    """Rate limit for attendance attempts, kept in the same session as the
    location history.

    The counter resets once an hour has passed since the last accepted
    attempt. Rejected attempts are not counted.
    """

    def __init__(self, attempts: int = 0, last_attempt: Optional[datetime] = None):
        self.attempts = attempts
        self.last_attempt = last_attempt

    def register(self, now: datetime) -> None:
        since = None if self.last_attempt is None else (now - self.last_attempt).total_seconds()
        if since is None or since > ATTEMPT_WINDOW_SECONDS:
            self.attempts = 0

        if self.attempts >= MAX_ATTEMPTS_PER_HOUR:
            raise TooManyAttemptsError("Terlalu banyak percobaan presensi. Coba lagi dalam 1 jam")
        if since is not None and since < MIN_SECONDS_BETWEEN_ATTEMPTS:
            raise TooManyAttemptsError(
                f"Tunggu {MIN_SECONDS_BETWEEN_ATTEMPTS} detik sebelum mencoba presensi lagi"
            )

        self.last_attempt = now
        self.attempts += 1

    def to_dict(self) -> dict:
        return {
            "attempts": self.attempts,
            "last_attempt": self.last_attempt.timestamp() if self.last_attempt else None,
        }

    @classmethod
    def from_dict(cls, data) -> "AttemptTracker":
        if not data:
            return cls()
        try:
            last = data.get("last_attempt")
            return cls(
                attempts=int(data.get("attempts") or 0),
                last_attempt=datetime.fromtimestamp(float(last)) if last is not None else None,
            )
        except (AttributeError, TypeError, ValueError):
            logger.warning("Resetting malformed attempt tracker: %r", data)
            return cls()


@dataclass(frozen=True)
class LocationValidation:
    is_valid: bool
    confidence: int
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"is_valid": self.is_valid, "confidence": self.confidence, "warnings": list(self.warnings)}


def implied_speed(previous: PositionSample, current: PositionSample) -> float:
    """Meters per second between two samples.

    Samples at the same instant are infinitely fast unless they are at the
    same spot.
    """

    distance = haversine_distance(previous.latitude, previous.longitude, current.latitude, current.longitude)
    seconds = (current.timestamp - previous.timestamp).total_seconds()
    if seconds <= 0:
        return math.inf if distance > 0 else 0.0
    return distance / seconds


def has_excess_zeros(value: float) -> bool:
    return EXCESS_ZEROS_MARKER in repr(float(value))


def matches_fake_pattern(latitude: float, longitude: float) -> bool:
    if latitude == 0 and longitude == 0:
        return True
    if has_excess_zeros(latitude) or has_excess_zeros(longitude):
        return True
    for ref_lat, ref_lng in FAKE_REFERENCE_COORDINATES:
        if haversine_distance(latitude, longitude, ref_lat, ref_lng) <= FAKE_COORDINATE_RADIUS_METERS:
            return True
    return False


class AntiSpoofingValidator:
    def validate(self, sample: PositionSample, history: LocationHistory) -> LocationValidation:
        """Score a sample against the session history, then record it.

        The sample is appended even when it fails, so a follow-up attempt is
        compared with what the device actually reported last.
        """

        confidence = INITIAL_CONFIDENCE
        warnings: List[str] = []

        if sample.accuracy < SUSPICIOUS_ACCURACY_METERS:
            confidence -= ACCURACY_PENALTY
            warnings.append(WARNING_ACCURACY)

        previous = history.last()
        if previous is not None and implied_speed(previous, sample) > MAX_PLAUSIBLE_SPEED_MPS:
            confidence -= TELEPORT_PENALTY
            warnings.append(WARNING_TELEPORT)

        if matches_fake_pattern(sample.latitude, sample.longitude):
            confidence -= FAKE_PATTERN_PENALTY
            warnings.append(WARNING_PATTERN)

        history.append(sample)

        result = LocationValidation(
            is_valid=confidence >= MIN_VALID_CONFIDENCE,
            confidence=confidence,
            warnings=warnings,
        )
        if not result.is_valid:
            logger.info("Location rejected (confidence=%s): %s", confidence, "; ".join(warnings))
        return result
