from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_float
from .model import Location
from .repository import LocationRepository

_COLUMNS = "location_id, name, latitude, longitude, radius_meters, is_active"


class MySQLLocationRepository(LocationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_model(r: dict) -> Location:
        return Location(
            location_id=int(r["location_id"]),
            name=r["name"],
            latitude=to_float(r["latitude"]),
            longitude=to_float(r["longitude"]),
            radius_meters=int(r["radius_meters"]),
            is_active=bool(r["is_active"]),
        )

    def get_active_locations(self) -> Sequence[Location]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_locations WHERE is_active=1 ORDER BY location_id ASC"
            )
            return [self._to_model(r) for r in fetchall(cur)]

    def list_all(self) -> Sequence[Location]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_locations ORDER BY is_active DESC, name ASC")
            return [self._to_model(r) for r in fetchall(cur)]

    def get_by_id(self, location_id: int) -> Optional[Location]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_locations WHERE location_id=%s", (int(location_id),))
            r = fetchone(cur)
            return self._to_model(r) if r else None

    def create(self, *, name: str, latitude: float, longitude: float, radius_meters: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_locations(name, latitude, longitude, radius_meters, is_active)
                VALUES(%s,%s,%s,%s,1)
                """,
                (name, latitude, longitude, int(radius_meters)),
            )
            return int(cur.lastrowid)

    def update(
        self,
        *,
        location_id: int,
        name: str,
        latitude: float,
        longitude: float,
        radius_meters: int,
        is_active: bool,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_locations
                SET name=%s, latitude=%s, longitude=%s, radius_meters=%s, is_active=%s
                WHERE location_id=%s
                """,
                (name, latitude, longitude, int(radius_meters), 1 if is_active else 0, int(location_id)),
            )
            return cur.rowcount > 0

    def set_active(self, *, location_id: int, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_locations SET is_active=%s WHERE location_id=%s",
                (1 if is_active else 0, int(location_id)),
            )
            return cur.rowcount > 0
