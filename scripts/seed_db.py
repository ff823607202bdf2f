from __future__ import annotations

import importlib

from dotenv import load_dotenv

from sikaji.common.log import configure_logging
from sikaji.config import get_settings_module
from sikaji.database.bootstrap import DEMO_USERS, SEED_PATH, apply_seed_sql, ensure_demo_users


def main() -> None:
    load_dotenv(override=False)
    configure_logging()
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=SEED_PATH)
    ensure_demo_users(db_config)

    print(
        "OK: data demo siap -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )
    for full_name, email, password, roles in DEMO_USERS:
        print(f"  {email} / {password}  ({', '.join(roles)})")


if __name__ == "__main__":
    main()
