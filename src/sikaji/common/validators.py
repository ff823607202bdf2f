from __future__ import annotations

from typing import Any

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} tidak boleh kosong")
    return value.strip()


def require_positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} harus berupa bilangan bulat positif")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} harus berupa bilangan bulat positif")
    if number != value and not isinstance(value, str):
        # 12.5 -> 12 would silently truncate
        raise ValidationError(f"{field_name} harus berupa bilangan bulat positif")
    if number <= 0:
        raise ValidationError(f"{field_name} harus berupa bilangan bulat positif")
    return number


def require_float(value: Any, field_name: str) -> float:
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field_name} tidak valid")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} tidak valid")
