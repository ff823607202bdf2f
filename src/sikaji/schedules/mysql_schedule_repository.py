from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_time
from .model import Schedule, ScheduleInput
from .repository import ScheduleRepository

_COLUMNS = """
    schedule_id, name, day_of_week, check_in_start, check_in_end,
    check_out_start, check_out_end, late_threshold_minutes,
    applies_to_all_classes, class_id, is_active
"""


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_model(r: dict) -> Schedule:
        return Schedule(
            schedule_id=int(r["schedule_id"]),
            name=r["name"],
            day_of_week=int(r["day_of_week"]),
            check_in_start=to_time(r["check_in_start"]),
            check_in_end=to_time(r["check_in_end"]),
            check_out_start=to_time(r["check_out_start"]),
            check_out_end=to_time(r["check_out_end"]),
            late_threshold_minutes=int(r["late_threshold_minutes"]),
            applies_to_all_classes=bool(r["applies_to_all_classes"]),
            class_id=int(r["class_id"]) if r.get("class_id") is not None else None,
            is_active=bool(r["is_active"]),
        )

    @staticmethod
    def _params(data: ScheduleInput) -> tuple:
        return (
            data.name,
            int(data.day_of_week),
            data.check_in_start,
            data.check_in_end,
            data.check_out_start,
            data.check_out_end,
            int(data.late_threshold_minutes),
            1 if data.applies_to_all_classes else 0,
            None if data.applies_to_all_classes else data.class_id,
            1 if data.is_active else 0,
        )

    def get_schedule_for_day(self, day_of_week: int, class_id: Optional[int] = None) -> Optional[Schedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_schedules
                WHERE is_active=1
                  AND day_of_week=%s
                  AND (applies_to_all_classes=1 OR class_id=%s)
                ORDER BY (class_id IS NOT NULL AND class_id=%s) DESC, created_at DESC, schedule_id DESC
                LIMIT 1
                """,
                (int(day_of_week), class_id, class_id),
            )
            r = fetchone(cur)
            return self._to_model(r) if r else None

    def list_all(self) -> Sequence[Schedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_schedules ORDER BY day_of_week ASC, check_in_start ASC")
            return [self._to_model(r) for r in fetchall(cur)]

    def get_by_id(self, schedule_id: int) -> Optional[Schedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_schedules WHERE schedule_id=%s", (int(schedule_id),))
            r = fetchone(cur)
            return self._to_model(r) if r else None

    def create(self, data: ScheduleInput) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_schedules(
                    name, day_of_week, check_in_start, check_in_end,
                    check_out_start, check_out_end, late_threshold_minutes,
                    applies_to_all_classes, class_id, is_active
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                self._params(data),
            )
            return int(cur.lastrowid)

    def update(self, schedule_id: int, data: ScheduleInput) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_schedules
                SET name=%s, day_of_week=%s, check_in_start=%s, check_in_end=%s,
                    check_out_start=%s, check_out_end=%s, late_threshold_minutes=%s,
                    applies_to_all_classes=%s, class_id=%s, is_active=%s
                WHERE schedule_id=%s
                """,
                self._params(data) + (int(schedule_id),),
            )
            return cur.rowcount > 0

    def delete(self, schedule_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_schedules WHERE schedule_id=%s", (int(schedule_id),))
            return cur.rowcount > 0
