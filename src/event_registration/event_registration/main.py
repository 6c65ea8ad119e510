from __future__ import annotations

import importlib
import json
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify, send_from_directory
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .auth.controller import register as register_auth
from .auth.guards import CONTAINER_KEY
from .container import Container, build_container
from .core.exceptions import DomainError
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .directory.controller import register as register_directory
from .events.controller import register as register_events
from .forms.controller import register as register_forms
from .inscriptions.controller import register as register_inscriptions
from .notifications.controller import register as register_notifications
from .reporting.controller import register as register_reporting
from .scheduler.runner import DailySweepScheduler
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[3]
SCHEDULER_KEY = "event_registration.scheduler"


def _resolve_upload_folder(value: str) -> Path:
    path = Path(value)
    return path if path.is_absolute() else REPO_ROOT / path


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        if exc.status_code >= 500:
            logger.error("Domain error: %s", exc)
        return jsonify({"message": str(exc)}), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        if exc.code == 413:
            return jsonify({"message": "Uploaded file is too large"}), 413
        return jsonify({"message": exc.description or exc.name}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        logger.exception("Unhandled error")
        body = {"message": "Internal server error"}
        if app.config.get("DEBUG"):
            body["error"] = str(exc)
        return jsonify(body), 500


def create_app(container: Optional[Container] = None, *, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["API_PREFIX"] = getattr(settings, "API_PREFIX", "/api")
    app.config["MAX_CONTENT_LENGTH"] = int(getattr(settings, "MAX_UPLOAD_BYTES", 5 * 1024 * 1024))
    app.config["SWEEP_HOUR"] = int(getattr(settings, "SWEEP_HOUR", 1))

    if container is None:
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        if getattr(settings, "AUTO_INIT_DB", False):
            apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
            logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))
        if getattr(settings, "AUTO_SEED_DB", False):
            apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
            ensure_demo_users(db_config)

        container = build_container(
            db_config=db_config,
            jwt_secret=getattr(settings, "JWT_SECRET", app.secret_key),
            jwt_expires_days=int(getattr(settings, "JWT_EXPIRES_DAYS", 7)),
            upload_folder=_resolve_upload_folder(getattr(settings, "UPLOAD_FOLDER", "uploads")),
            notifications_async=bool(getattr(settings, "NOTIFICATIONS_ASYNC", False)),
        )

    app.extensions[CONTAINER_KEY] = container
    _register_error_handlers(app)

    @app.route("/uploads/<path:filename>", endpoint="uploaded_file")
    def uploaded_file(filename: str):
        return send_from_directory(container.storage.root.resolve(), filename)

    @app.cli.command("sweep-events")
    def sweep_events():
        """Run one event status/reminder sweep."""
        report = container.sweeper.run()
        print(json.dumps(report.to_dict()))

    register_auth(app, container)
    register_users(app, container)
    register_directory(app, container)
    register_forms(app, container)
    register_events(app, container)
    register_inscriptions(app, container)
    register_notifications(app, container)
    register_reporting(app, container)

    if getattr(settings, "ENABLE_SCHEDULER", False) and not app.config["TESTING"]:
        scheduler = DailySweepScheduler(container.sweeper, hour=app.config["SWEEP_HOUR"])
        scheduler.start()
        app.extensions[SCHEDULER_KEY] = scheduler

    return app
