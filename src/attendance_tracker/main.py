from __future__ import annotations

import importlib
import logging
from types import ModuleType
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .attendance.rules import AttendancePolicy
from .common.datetime_utils import get_timezone, parse_clock_time
from .common.errors import register as register_errors
from .container import Container, build_container
from .core.constants import (
    DEFAULT_EVENT_QUEUE_SIZE,
    DEFAULT_HALF_DAY_HOURS,
    DEFAULT_LATE_GRACE_MINUTES,
    DEFAULT_TIMEZONE,
    DEFAULT_WORK_START,
    EVENT_KEEPALIVE_SECONDS,
)
from .database.bootstrap import apply_schema, ensure_demo_users, list_tables
from .database.connection import DatabaseConnection, DBConfig
from .notifications.controller import register as register_notifications
from .reports.controller import register as register_reports
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def policy_from_settings(settings: ModuleType) -> AttendancePolicy:
    return AttendancePolicy(
        work_start=parse_clock_time(getattr(settings, "WORK_START", DEFAULT_WORK_START)),
        late_grace_minutes=int(getattr(settings, "LATE_GRACE_MINUTES", DEFAULT_LATE_GRACE_MINUTES)),
        half_day_hours=float(getattr(settings, "HALF_DAY_HOURS", DEFAULT_HALF_DAY_HOURS)),
        timezone=get_timezone(getattr(settings, "TIMEZONE", DEFAULT_TIMEZONE)),
    )


def _configure_logging(settings: ModuleType) -> None:
    level = str(getattr(settings, "LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(container: Optional[Container] = None, *, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    _configure_logging(settings)

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["EVENT_KEEPALIVE_SECONDS"] = float(
        getattr(settings, "EVENT_KEEPALIVE_SECONDS", EVENT_KEEPALIVE_SECONDS)
    )

    if container is None:
        db_config = DBConfig.from_dict(getattr(settings, "DB_CONFIG"))
        conn = DatabaseConnection.get_instance(db_config)
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module, db_config.user, db_config.host, db_config.port, db_config.database,
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(conn)
            logger.info("schema ready (tables=%d)", len(list_tables(conn)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_users(conn)

        container = build_container(
            conn=conn,
            policy=policy_from_settings(settings),
            event_queue_size=int(getattr(settings, "EVENT_QUEUE_SIZE", DEFAULT_EVENT_QUEUE_SIZE)),
        )

    app.extensions["attendance_container"] = container

    register_errors(app)
    register_users(app, container)
    register_attendance(app, container)
    register_reports(app, container)
    register_notifications(app, container)

    @app.route("/api/health", endpoint="health")
    def health():
        return jsonify({"status": "ok", "service": "attendance-tracker"})

    return app
