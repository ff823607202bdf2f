from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Account that can log in. A user may hold several roles."""

    user_id: int
    full_name: str
    email: str
    password_hash: str
    roles: Tuple[Role, ...] = field(default_factory=tuple)
    is_active: bool = True
