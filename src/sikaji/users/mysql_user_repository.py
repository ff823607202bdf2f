from __future__ import annotations

from typing import Optional

from ..core.permissions import parse_roles
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load(self, where: str, value) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT user_id, full_name, email, password_hash, is_active FROM users WHERE {where}",
                (value,),
            )
            r = fetchone(cur)
            if not r:
                return None

            cur.execute(
                "SELECT role FROM user_roles WHERE user_id=%s AND is_active=1 ORDER BY id ASC",
                (int(r["user_id"]),),
            )
            roles = parse_roles(row["role"] for row in fetchall(cur))

            return User(
                user_id=int(r["user_id"]),
                full_name=r["full_name"],
                email=r["email"],
                password_hash=r["password_hash"],
                roles=tuple(roles),
                is_active=bool(r["is_active"]),
            )

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._load("user_id=%s", int(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        return self._load("LOWER(email)=LOWER(%s)", email.strip())
