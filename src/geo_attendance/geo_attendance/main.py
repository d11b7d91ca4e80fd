from __future__ import annotations

import atexit
import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .core.settings import AttendanceSettings
from .database.bootstrap import apply_schema, list_tables

from .container import build_container
from .attendance.controller import register as register_attendance

logger = logging.getLogger(__name__)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    attendance_settings = AttendanceSettings.from_module(settings)
    logger.info(
        "settings=%s db=%s@%s:%s/%s office=(%s, %s) radius=%sm",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
        attendance_settings.office_latitude,
        attendance_settings.office_longitude,
        attendance_settings.office_radius_meters,
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(db_config, schema_path=schema_path)
        logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

    container = build_container(db_config=db_config, settings=attendance_settings)
    atexit.register(container.notifier.shutdown, wait=False)

    register_attendance(app, container)

    return app
