from __future__ import annotations

from typing import Optional, Protocol

from .model import User


class UserRepository(Protocol):
    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        """Lookup is case-insensitive; roles include only active assignments."""

        raise NotImplementedError
