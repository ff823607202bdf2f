from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence, Set

from ..core.enums import PermitStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Permit
from .repository import PermitRepository

_COLUMNS = """
    permit_id, student_id, permit_type, reason, start_date, end_date,
    status, created_at, reviewed_by, reviewed_at, review_notes
"""


class MySQLPermitRepository(PermitRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_model(r: dict) -> Permit:
        return Permit(
            permit_id=int(r["permit_id"]),
            student_id=int(r["student_id"]),
            permit_type=r["permit_type"],
            reason=r["reason"],
            start_date=r["start_date"],
            end_date=r["end_date"],
            status=PermitStatus(r["status"]),
            created_at=r["created_at"],
            reviewed_by=int(r["reviewed_by"]) if r.get("reviewed_by") is not None else None,
            reviewed_at=r.get("reviewed_at"),
            review_notes=r.get("review_notes"),
        )

    def create(self, *, student_id: int, permit_type: str, reason: str, start_date: date, end_date: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO student_permits(student_id, permit_type, reason, start_date, end_date, status)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(student_id), permit_type, reason, start_date, end_date, PermitStatus.PENDING.value),
            )
            return int(cur.lastrowid)

    def get_by_id(self, permit_id: int) -> Optional[Permit]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM student_permits WHERE permit_id=%s", (int(permit_id),))
            r = fetchone(cur)
            return self._to_model(r) if r else None

    def list_for_student(self, student_id: int, *, limit: int) -> Sequence[Permit]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM student_permits
                WHERE student_id=%s
                ORDER BY created_at DESC, permit_id DESC
                LIMIT %s
                """,
                (int(student_id), int(limit)),
            )
            return [self._to_model(r) for r in fetchall(cur)]

    def list_pending(self, *, limit: int) -> Sequence[Permit]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM student_permits
                WHERE status=%s
                ORDER BY created_at ASC, permit_id ASC
                LIMIT %s
                """,
                (PermitStatus.PENDING.value, int(limit)),
            )
            return [self._to_model(r) for r in fetchall(cur)]

    def decide(
        self,
        *,
        permit_id: int,
        status: PermitStatus,
        reviewed_by: int,
        reviewed_at: datetime,
        review_notes: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE student_permits
                SET status=%s, reviewed_by=%s, reviewed_at=%s, review_notes=%s
                WHERE permit_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(reviewed_by),
                    reviewed_at,
                    review_notes,
                    int(permit_id),
                    PermitStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def has_approved_permit(self, student_id: int, on_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1 AS found FROM student_permits
                WHERE student_id=%s AND status=%s AND start_date<=%s AND end_date>=%s
                LIMIT 1
                """,
                (int(student_id), PermitStatus.APPROVED.value, on_date, on_date),
            )
            return fetchone(cur) is not None

    def approved_student_ids(self, on_date: date) -> Set[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT DISTINCT student_id FROM student_permits
                WHERE status=%s AND start_date<=%s AND end_date>=%s
                """,
                (PermitStatus.APPROVED.value, on_date, on_date),
            )
            return {int(r["student_id"]) for r in fetchall(cur)}
