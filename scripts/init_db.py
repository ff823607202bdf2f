from __future__ import annotations

import importlib

from dotenv import load_dotenv

from sikaji.common.log import configure_logging
from sikaji.config import get_settings_module
from sikaji.database.bootstrap import SCHEMA_PATH, apply_schema, list_tables


def main() -> None:
    load_dotenv(override=False)
    configure_logging()
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=SCHEMA_PATH)
    tables = list_tables(db_config)
    print(
        "OK: schema.sql diterapkan -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(tables={len(tables)})"
    )


if __name__ == "__main__":
    main()
