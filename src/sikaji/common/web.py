"""Shared helpers for the JSON controllers."""

from __future__ import annotations

import logging
from functools import wraps

from flask import jsonify, request, session

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    LocationUnavailableError,
    NotFoundError,
    OutsideGeofenceError,
    ScheduleMissingError,
    SpoofedLocationError,
    TooManyAttemptsError,
)
from ..core.permissions import Capability, can, parse_roles

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Terjadi kesalahan sistem, silakan coba lagi"


def current_roles():
    return parse_roles(session.get("roles") or [])


def current_user_id() -> int:
    return int(session["user_id"])


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "message": "Silakan login terlebih dahulu"}), 401
        return view(*args, **kwargs)

    return wrapper


def capability_required(capability: Capability):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Silakan login terlebih dahulu"}), 401
            if not can(current_roles(), capability):
                return jsonify({"success": False, "message": "Anda tidak memiliki akses"}), 403
            return view(*args, **kwargs)

        return wrapper

    return decorator


def _status_for(error: DomainError) -> int:
    if isinstance(error, AuthenticationError):
        return 401
    if isinstance(error, AuthorizationError):
        return 403
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, ScheduleMissingError):
        return 409
    if isinstance(error, (OutsideGeofenceError, SpoofedLocationError, LocationUnavailableError)):
        return 422
    if isinstance(error, TooManyAttemptsError):
        return 429
    return 400


def domain_error_response(error: DomainError):
    body = {"success": False, "message": str(error)}
    if isinstance(error, SpoofedLocationError):
        body["warnings"] = error.warnings
        body["confidence"] = error.confidence
    return jsonify(body), _status_for(error)


def system_error_response(action: str):
    logger.exception("Unexpected error while %s", action)
    return jsonify({"success": False, "message": GENERIC_ERROR_MESSAGE}), 500


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}
