from __future__ import annotations

from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, List, Optional

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield (connection, cursor); commit on success, roll back on error."""

    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    return list(cur.fetchall() or [])


def to_time(value: Any) -> Optional[time]:
    """Normalize a MySQL TIME column.

    The connector returns TIME as ``timedelta``; older drivers and raw SQL
    fixtures may hand back ``time`` or an ``HH:MM[:SS]`` string instead.
    """

    if value is None:
        return None
    if isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        seconds = int(value.total_seconds()) % 86400
        return time(seconds // 3600, (seconds % 3600) // 60, seconds % 60)
    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        return time(int(parts[0]), int(parts[1]), int(parts[2]) if len(parts) > 2 and parts[2] else 0)
    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")


def to_float(value: Any) -> Optional[float]:
    """DECIMAL columns come back as Decimal; the domain works in float."""

    return None if value is None else float(value)
