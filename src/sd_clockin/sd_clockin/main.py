from __future__ import annotations

import importlib
import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .admin_users.controller import register as register_admin_users
from .analytics.controller import register as register_analytics
from .auth.controller import register as register_auth
from .auth.microsoft import MicrosoftAuthConfig
from .checkins.controller import register as register_checkins
from .common.controller import register as register_common
from .container import Container, build_container
from .core.exceptions import DomainError
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_admin_user, list_tables
from .imports.controller import register as register_imports
from .jobs.auto_clock_out import start_scheduler
from .reports.controller import register as register_reports
from .schedules.controller import register as register_schedules
from .students.controller import register as register_students
from .terms.controller import register as register_terms

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DEV_ORIGINS = [r"http://localhost(:\d+)?", r"http://127\.0\.0\.1(:\d+)?"]


def configure_logging(app: Flask, *, level: int, log_file: Optional[str] = None) -> None:
    root = logging.getLogger()
    if not root.handlers:
        stream = logging.StreamHandler()
        stream.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(stream)
    root.setLevel(level)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=5, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT + " [in %(pathname)s:%(lineno)d]"))
        file_handler.setLevel(level)
        app.logger.addHandler(file_handler)
        root.addHandler(file_handler)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def _handle_domain_error(exc: DomainError):
        return jsonify({"message": str(exc)}), exc.status_code

    @app.errorhandler(HTTPException)
    def _handle_http_error(exc: HTTPException):
        return jsonify({"message": exc.description or exc.name}), exc.code or 500

    @app.errorhandler(Exception)
    def _handle_unexpected_error(exc: Exception):
        app.logger.exception("Unhandled exception")
        return jsonify({"message": "Internal server error"}), 500


def _register_routes(app: Flask, container: Container) -> None:
    register_common(app, container)
    register_auth(app, container)
    register_admin_users(app, container)
    register_students(app, container)
    register_terms(app, container)
    register_schedules(app, container)
    register_checkins(app, container)
    register_imports(app, container)
    register_analytics(app, container)
    register_reports(app, container)


def create_app(*, container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    debug = bool(getattr(settings, "DEBUG", False))
    testing = bool(getattr(settings, "TESTING", False))
    timezone = getattr(settings, "APP_TIMEZONE", "America/Los_Angeles")

    app.config["DEBUG"] = debug
    app.config["TESTING"] = testing
    app.config["AUTH_REQUIRED"] = bool(getattr(settings, "AUTH_REQUIRED", True))
    app.config["FRONTEND_URL"] = getattr(settings, "FRONTEND_URL", "")
    app.config["APP_TIMEZONE"] = timezone
    app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
    app.config["SESSION_COOKIE_SECURE"] = bool(getattr(settings, "SESSION_COOKIE_SECURE", False))

    configure_logging(
        app,
        level=logging.DEBUG if debug else logging.INFO,
        log_file=getattr(settings, "LOG_FILE", None),
    )

    origins = list(getattr(settings, "ALLOWED_ORIGINS", []))
    if debug:
        origins += DEV_ORIGINS
    CORS(app, resources={r"/api/*": {"origins": origins}}, supports_credentials=True)

    register_error_handlers(app)

    if container is None:
        app.logger.info(
            "settings=%s db=%s@%s:%s/%s tz=%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
            timezone,
        )

        database_dir = Path(__file__).resolve().parents[3] / "database"
        if getattr(settings, "AUTO_INIT_DB", False):
            apply_schema(db_config, schema_path=database_dir / "schema.sql")
            app.logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))
        if getattr(settings, "AUTO_SEED_DB", False):
            apply_seed_sql(db_config, seed_path=database_dir / "seed.sql")
            app.logger.info("Demo seed ready")
        bootstrap_email = getattr(settings, "BOOTSTRAP_ADMIN_EMAIL", "")
        if bootstrap_email:
            ensure_admin_user(db_config, email=bootstrap_email)

        container = build_container(
            db_config=db_config,
            timezone=timezone,
            redis_url=getattr(settings, "REDIS_URL", None),
            microsoft_auth=MicrosoftAuthConfig.from_settings(settings),
        )

    _register_routes(app, container)

    # The reloader imports the app twice; only the serving process schedules.
    if (
        getattr(settings, "AUTO_CLOCK_OUT_ENABLED", False)
        and not testing
        and (not debug or os.environ.get("WERKZEUG_RUN_MAIN") == "true")
    ):
        app.extensions["auto_clock_out_scheduler"] = start_scheduler(container.auto_clock_out_job, timezone=timezone)

    return app
