from __future__ import annotations

from typing import Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced row does not exist."""


class LocationUnavailableError(DomainError):
    """The device could not provide a position (denied, unsupported, timeout)."""


class OutsideGeofenceError(DomainError):
    """The position is not inside any active school location."""


class ScheduleMissingError(DomainError):
    """No active attendance schedule exists for today."""


class SpoofedLocationError(DomainError):
    """The position failed the anti-spoofing heuristic."""

    def __init__(self, message: str, *, confidence: int, warnings: Sequence[str]):
        super().__init__(message)
        self.confidence = confidence
        self.warnings = list(warnings)


class TooManyAttemptsError(DomainError):
    """Check-in/check-out attempted too often from one session."""
