from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .attendance.controller import register as register_attendance
from .common.log import configure_logging
from .config import get_settings_module
from .container import Container, build_container
from .database.bootstrap import (
    SCHEMA_PATH,
    SEED_PATH,
    apply_schema,
    apply_seed_sql,
    ensure_demo_users,
    list_tables,
)
from .discipline.controller import register as register_discipline
from .locations.controller import register as register_locations
from .permits.controller import register as register_permits
from .reports.controller import register as register_reports
from .schedules.controller import register as register_schedules
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory. Pass ``container`` to run on other repositories."""

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["JSON_SORT_KEYS"] = False
    db_config = getattr(settings, "DB_CONFIG")
    verify_url = getattr(settings, "PERMIT_VERIFY_URL", "")

    if container is None:
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=SEED_PATH)
            ensure_demo_users(db_config)

        container = build_container(db_config=db_config, permit_verify_url=verify_url)

    register_users(app, container)
    register_attendance(app, container)
    register_locations(app, container)
    register_schedules(app, container)
    register_permits(app, container)
    register_reports(app, container)
    register_discipline(app, container)

    return app


if __name__ == "__main__":
    application = create_app()
    application.run(host="0.0.0.0", port=5000, debug=application.config["DEBUG"])
