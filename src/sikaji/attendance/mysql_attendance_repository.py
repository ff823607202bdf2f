from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_float, to_time
from .model import AttendanceRecord, CheckInData, CheckOutData
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, student_id, attendance_date, status,
    check_in_time, check_in_latitude, check_in_longitude, check_in_location_id,
    check_out_time, check_out_latitude, check_out_longitude, check_out_location_id,
    notes, device_fingerprint, violation_created
"""


def _opt_int(value) -> Optional[int]:
    return int(value) if value is not None else None


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_model(r: dict) -> AttendanceRecord:
        return AttendanceRecord(
            attendance_id=int(r["attendance_id"]),
            student_id=int(r["student_id"]),
            attendance_date=r["attendance_date"],
            status=AttendanceStatus(r["status"]),
            check_in_time=to_time(r.get("check_in_time")),
            check_in_latitude=to_float(r.get("check_in_latitude")),
            check_in_longitude=to_float(r.get("check_in_longitude")),
            check_in_location_id=_opt_int(r.get("check_in_location_id")),
            check_out_time=to_time(r.get("check_out_time")),
            check_out_latitude=to_float(r.get("check_out_latitude")),
            check_out_longitude=to_float(r.get("check_out_longitude")),
            check_out_location_id=_opt_int(r.get("check_out_location_id")),
            notes=r.get("notes"),
            device_fingerprint=r.get("device_fingerprint"),
            violation_created=bool(r.get("violation_created")),
        )

    def get_today_record(self, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM student_self_attendances
                WHERE student_id=%s AND attendance_date=%s
                """,
                (int(student_id), attendance_date),
            )
            r = fetchone(cur)
            return self._to_model(r) if r else None

    def upsert_check_in(self, data: CheckInData) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO student_self_attendances(
                    student_id, attendance_date, check_in_time,
                    check_in_latitude, check_in_longitude, check_in_location_id,
                    status, notes, device_fingerprint, violation_created
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    check_in_time=VALUES(check_in_time),
                    check_in_latitude=VALUES(check_in_latitude),
                    check_in_longitude=VALUES(check_in_longitude),
                    check_in_location_id=VALUES(check_in_location_id),
                    check_out_time=NULL,
                    check_out_latitude=NULL,
                    check_out_longitude=NULL,
                    check_out_location_id=NULL,
                    status=VALUES(status),
                    notes=VALUES(notes),
                    device_fingerprint=VALUES(device_fingerprint),
                    violation_created=VALUES(violation_created)
                """,
                (
                    int(data.student_id),
                    data.attendance_date,
                    data.check_in_time,
                    data.latitude,
                    data.longitude,
                    int(data.location_id),
                    data.status.value,
                    data.notes,
                    data.device_fingerprint,
                    1 if data.violation_created else 0,
                ),
            )

            # On the update path lastrowid is 0; look the row up instead.
            if cur.lastrowid:
                return int(cur.lastrowid)

            cur.execute(
                "SELECT attendance_id FROM student_self_attendances WHERE student_id=%s AND attendance_date=%s",
                (int(data.student_id), data.attendance_date),
            )
            r = fetchone(cur)
            return int(r["attendance_id"]) if r else 0

    def update_check_out(self, data: CheckOutData) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE student_self_attendances
                SET check_out_time=%s,
                    check_out_latitude=%s,
                    check_out_longitude=%s,
                    check_out_location_id=%s,
                    notes=%s
                WHERE attendance_id=%s AND check_out_time IS NULL
                """,
                (
                    data.check_out_time,
                    data.latitude,
                    data.longitude,
                    data.location_id,
                    data.notes,
                    int(data.attendance_id),
                ),
            )
            return cur.rowcount > 0

    def create_absent(self, *, student_id: int, attendance_date: date, notes: Optional[str] = None) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            # A concurrent check-in may have landed first; keep it.
            cur.execute(
                """
                INSERT IGNORE INTO student_self_attendances(student_id, attendance_date, status, notes)
                VALUES(%s,%s,%s,%s)
                """,
                (int(student_id), attendance_date, AttendanceStatus.ABSENT.value, notes),
            )
            return int(cur.lastrowid or 0)

    def list_for_students(
        self, *, student_ids: Sequence[int], start_date: date, end_date: date
    ) -> Sequence[AttendanceRecord]:
        if not student_ids:
            return []

        placeholders = ",".join(["%s"] * len(student_ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM student_self_attendances
                WHERE student_id IN ({placeholders})
                  AND attendance_date BETWEEN %s AND %s
                ORDER BY attendance_date ASC, student_id ASC
                """,
                tuple(int(s) for s in student_ids) + (start_date, end_date),
            )
            return [self._to_model(r) for r in fetchall(cur)]
