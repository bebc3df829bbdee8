from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.commands import register as register_attendance
from .container import build_container
from .core.policy import EnginePolicy
from .database.bootstrap import apply_schema, list_tables
from .database.connection import DBConfig
from .points.commands import register as register_points

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"), format=LOG_FORMAT)
    logger.info("settings=%s db=%s", settings_module, DBConfig.from_dict(db_config).describe())

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(db_config, schema_path=schema_path)
        logger.info("schema ready (tables=%s)", len(list_tables(db_config)))

    container = build_container(db_config=db_config, policy=EnginePolicy.from_settings(settings))
    app.extensions["attendance_points"] = container

    register_attendance(app, container)
    register_points(app, container)

    return app
