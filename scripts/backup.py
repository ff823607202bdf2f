"""Backup the database with ``mysqldump``.

Without the MySQL client tools, use MySQL Workbench or phpMyAdmin instead.
"""

from __future__ import annotations

import importlib
import os
import subprocess
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

from sikaji.config import get_settings_module


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db = settings.DB_CONFIG

    out_dir = Path(__file__).resolve().parents[1] / "backups"
    out_dir.mkdir(parents=True, exist_ok=True)

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_file = out_dir / f"{db['database']}_{ts}.sql"

    cmd = [
        "mysqldump",
        f"-h{db['host']}",
        f"-P{db.get('port', 3306)}",
        f"-u{db['user']}",
        "--single-transaction",
        db["database"],
    ]
    env = None
    if db.get("password"):
        env = {**os.environ, "MYSQL_PWD": str(db["password"])}

    try:
        with out_file.open("wb") as f:
            subprocess.run(cmd, stdout=f, stderr=subprocess.PIPE, check=True, env=env)
        print(f"OK: backup dibuat: {out_file}")
    except FileNotFoundError:
        raise SystemExit("`mysqldump` tidak ditemukan. Pasang MySQL client tools atau backup lewat Workbench.")


if __name__ == "__main__":
    main()
