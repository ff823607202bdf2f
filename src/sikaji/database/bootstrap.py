from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from werkzeug.security import generate_password_hash

from .connection import DatabaseConnection, DBConfig

logger = logging.getLogger(__name__)

# shipped inside the package next to this module
SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"
SEED_PATH = Path(__file__).resolve().parent / "seed.sql"

# (full_name, email, password, roles)
DEMO_USERS = (
    ("Admin Kesiswaan", "admin@sikaji.sch.id", "admin123", ("admin", "admin_kesiswaan")),
    ("Bu Ratna Wali Kelas", "walikelas@sikaji.sch.id", "guru123", ("guru", "wali_kelas")),
    ("Pak Budi Orang Tua", "orangtua@sikaji.sch.id", "ortu123", ("orang_tua",)),
    ("Andi Pratama", "andi@sikaji.sch.id", "siswa123", ("siswa",)),
    ("Sari Wulandari", "sari@sikaji.sch.id", "siswa123", ("siswa",)),
)

# (student email, nis, class "grade name", parent email)
DEMO_STUDENTS = (
    ("andi@sikaji.sch.id", "2024001", ("X", "TKJ 1"), "orangtua@sikaji.sch.id"),
    ("sari@sikaji.sch.id", "2024002", ("X", "TKJ 1"), None),
)


def _strip_create_db_and_use(sql: str) -> str:
    # The target database comes from DB_CONFIG, not from the script.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_line_comments(sql: str) -> str:
    return "\n".join(line for line in sql.splitlines() if not line.lstrip().startswith("--"))


def _iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a script on ``;`` outside of quoted literals."""

    buf: list[str] = []
    quote: str | None = None
    escape = False

    for ch in sql:
        buf.append(ch)
        if escape:
            escape = False
            continue
        if ch == "\\" and quote:
            escape = True
            continue
        if ch in ("'", '"'):
            if quote is None:
                quote = ch
            elif quote == ch:
                quote = None
            continue
        if ch == ";" and quote is None:
            buf.pop()
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _run_script(db_config: dict, path: str | Path) -> int:
    sql = _strip_line_comments(_strip_create_db_and_use(Path(path).read_text(encoding="utf-8")))
    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect()
    count = 0
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
    finally:
        conn.close()
    return count


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = DatabaseConnection(target).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    count = _run_script(db_config, schema_path)
    logger.info("Applied %d schema statements from %s", count, schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    count = _run_script(db_config, seed_path)
    logger.info("Applied %d seed statements from %s", count, seed_path)


def ensure_demo_users(db_config: dict) -> None:
    """Create demo accounts, their roles and the linked student rows."""

    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect()
    try:
        cur = conn.cursor(dictionary=True)
        user_ids: dict[str, int] = {}

        for full_name, email, password, roles in DEMO_USERS:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT user_id FROM users WHERE email=%s", (email,))
            existing = cur.fetchone()
            if existing:
                user_id = int(existing["user_id"])
                cur.execute(
                    "UPDATE users SET full_name=%s, password_hash=%s, is_active=1 WHERE user_id=%s",
                    (full_name, password_hash, user_id),
                )
            else:
                cur.execute(
                    "INSERT INTO users (full_name, email, password_hash) VALUES (%s, %s, %s)",
                    (full_name, email, password_hash),
                )
                user_id = int(cur.lastrowid)
            user_ids[email] = user_id

            for role in roles:
                cur.execute(
                    """
                    INSERT INTO user_roles (user_id, role, is_active) VALUES (%s, %s, 1)
                    ON DUPLICATE KEY UPDATE is_active = 1
                    """,
                    (user_id, role),
                )

        for email, nis, (grade, class_name), parent_email in DEMO_STUDENTS:
            cur.execute("SELECT class_id FROM classes WHERE grade=%s AND name=%s", (grade, class_name))
            row = cur.fetchone()
            if not row:
                raise RuntimeError(f"Missing classes row for {grade} {class_name}")
            class_id = int(row["class_id"])
            parent_id = user_ids.get(parent_email) if parent_email else None
            full_name = next(u[0] for u in DEMO_USERS if u[1] == email)

            cur.execute(
                """
                INSERT INTO students (user_id, full_name, nis, class_id, parent_user_id, is_active)
                VALUES (%s, %s, %s, %s, %s, 1)
                ON DUPLICATE KEY UPDATE
                    user_id = VALUES(user_id),
                    full_name = VALUES(full_name),
                    class_id = VALUES(class_id),
                    parent_user_id = VALUES(parent_user_id),
                    is_active = 1
                """,
                (user_ids[email], full_name, nis, class_id, parent_id),
            )

        cur.execute(
            "UPDATE classes SET homeroom_teacher_id=%s WHERE grade=%s AND name=%s",
            (user_ids["walikelas@sikaji.sch.id"], "X", "TKJ 1"),
        )

        conn.commit()
        logger.info("Demo users ready: %s", ", ".join(sorted(user_ids)))
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
