from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import PointTotals, Violation
from .repository import DisciplineRepository


class MySQLDisciplineRepository(DisciplineRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add_violation(
        self,
        *,
        student_id: int,
        violation_type: str,
        violation_date: date,
        point_deduction: int,
        description: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO student_violations(
                    student_id, violation_type, violation_date, description, point_deduction, status
                )
                VALUES(%s,%s,%s,%s,%s,'active')
                """,
                (int(student_id), violation_type, violation_date, description, int(point_deduction)),
            )
            return int(cur.lastrowid)

    def add_violation_once(
        self,
        *,
        student_id: int,
        violation_type: str,
        violation_date: date,
        point_deduction: int,
        description: Optional[str] = None,
    ) -> int:
        key = (int(student_id), violation_type, violation_date)
        with db_cursor(self._conn_factory) as (_, cur):
            # INSERT ... SELECT locks the matching index range, so two racing
            # check-ins cannot both insert
            cur.execute(
                """
                INSERT INTO student_violations(
                    student_id, violation_type, violation_date, description, point_deduction, status
                )
                SELECT %s,%s,%s,%s,%s,'active' FROM DUAL
                WHERE NOT EXISTS (
                    SELECT 1 FROM student_violations
                    WHERE student_id=%s AND violation_type=%s AND violation_date=%s
                )
                """,
                (key[0], violation_type, violation_date, description, int(point_deduction)) + key,
            )
            if cur.rowcount:
                return int(cur.lastrowid)
            cur.execute(
                """
                SELECT violation_id FROM student_violations
                WHERE student_id=%s AND violation_type=%s AND violation_date=%s
                ORDER BY violation_id
                LIMIT 1
                """,
                key,
            )
            row = fetchone(cur) or {}
            return int(row["violation_id"])

    def point_totals(self, student_id: int) -> PointTotals:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COALESCE(SUM(point_deduction), 0) AS points, COUNT(*) AS cnt
                FROM student_violations
                WHERE student_id=%s AND status='active'
                """,
                (int(student_id),),
            )
            v = fetchone(cur) or {}
            cur.execute(
                """
                SELECT COALESCE(SUM(point_reward), 0) AS points, COUNT(*) AS cnt
                FROM student_achievements
                WHERE student_id=%s AND status='verified'
                """,
                (int(student_id),),
            )
            a = fetchone(cur) or {}
            return PointTotals(
                violation_points=int(v.get("points") or 0),
                violation_count=int(v.get("cnt") or 0),
                achievement_points=int(a.get("points") or 0),
                achievement_count=int(a.get("cnt") or 0),
            )

    def list_violations(self, student_id: int, *, limit: int) -> Sequence[Violation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT violation_id, student_id, violation_type, violation_date,
                       point_deduction, status, description
                FROM student_violations
                WHERE student_id=%s
                ORDER BY violation_date DESC, violation_id DESC
                LIMIT %s
                """,
                (int(student_id), int(limit)),
            )
            return [
                Violation(
                    violation_id=int(r["violation_id"]),
                    student_id=int(r["student_id"]),
                    violation_type=r["violation_type"],
                    violation_date=r["violation_date"],
                    point_deduction=int(r["point_deduction"]),
                    status=r["status"],
                    description=r.get("description"),
                )
                for r in fetchall(cur)
            ]
