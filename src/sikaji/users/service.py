from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

from werkzeug.security import check_password_hash

from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    full_name: str
    roles: Tuple[Role, ...]

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "full_name": self.full_name,
            "roles": [r.value for r in self.roles],
        }


class AuthService:
    """Use case: authenticate a user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> SessionUser:
        email = require_non_empty(email or "", "Email")
        user = self._users.get_by_email(email)
        if not user or not user.is_active:
            raise AuthenticationError("Email atau kata sandi salah")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # placeholder or corrupted hash in the table
            logger.warning("Unusable password hash for user_id=%s", user.user_id)
            ok = False

        if not ok:
            raise AuthenticationError("Email atau kata sandi salah")

        if not user.roles:
            raise AuthenticationError("Akun belum memiliki peran aktif")

        return SessionUser(user_id=user.user_id, full_name=user.full_name, roles=user.roles)
