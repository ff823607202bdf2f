from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Student
from .repository import StudentRepository

_COLUMNS = "student_id, user_id, full_name, nis, class_id, parent_user_id, is_active"


def _opt_int(value) -> Optional[int]:
    return int(value) if value is not None else None


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_model(r: dict) -> Student:
        return Student(
            student_id=int(r["student_id"]),
            user_id=_opt_int(r.get("user_id")),
            full_name=r["full_name"],
            nis=r["nis"],
            class_id=_opt_int(r.get("class_id")),
            parent_user_id=_opt_int(r.get("parent_user_id")),
            is_active=bool(r["is_active"]),
        )

    def get_by_id(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE student_id=%s", (int(student_id),))
            r = fetchone(cur)
            return self._to_model(r) if r else None

    def get_by_user_id(self, user_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE user_id=%s", (int(user_id),))
            r = fetchone(cur)
            return self._to_model(r) if r else None

    def list_active(self, *, class_id: Optional[int] = None) -> Sequence[Student]:
        clauses = ["is_active=1"]
        params: list[object] = []
        if class_id is not None:
            clauses.append("class_id=%s")
            params.append(int(class_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM students WHERE {' AND '.join(clauses)} ORDER BY full_name ASC",
                tuple(params),
            )
            return [self._to_model(r) for r in fetchall(cur)]
