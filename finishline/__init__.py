"""
FinishLine
Flask Application Factory.

Usage:
    from finishline import create_app
    app = create_app()           # APP_ENV, else "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

import click
from flask import Flask, abort, request
from flask_cors import CORS
from flask_migrate import Migrate
from sqlalchemy import engine as _sa_engine
from sqlalchemy import event as _sa_event

from finishline.config import config
from finishline.middleware.logging_config import configure_logging
from finishline.middleware.timing import init_request_timing
from finishline.models import db

logger = logging.getLogger(__name__)

migrate = Migrate()


# ── SQLite FK enforcement (global engine event) ─────────────────────────
@_sa_event.listens_for(_sa_engine.Engine, "connect")
def _enable_sqlite_fk(dbapi_conn, connection_record):
    """Enable foreign key enforcement for SQLite connections."""
    if "sqlite" in type(dbapi_conn).__module__:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _init_request_guard(app):
    """Reject oversized bodies (413) and non-JSON writes to the API (415)."""

    @app.before_request
    def _guard_request():
        max_len = app.config.get("MAX_CONTENT_LENGTH")
        if max_len and request.content_length and request.content_length > max_len:
            abort(413, description="Request body too large")
        if request.method in ("POST", "PUT", "PATCH") and request.path.startswith("/api/"):
            if request.data and "json" not in (request.content_type or ""):
                abort(415, description="Content-Type must be application/json")


def _register_cli(app):
    @app.cli.command("seed-demo")
    def seed_demo_cmd():
        """Seed demo users, a team, projects and work packages."""
        from finishline.services.seed_service import seed_demo_data

        counts = seed_demo_data()
        db.session.commit()
        click.echo(f"Seeded: {counts}")


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: "development", "testing" or "production".
                     Defaults to APP_ENV env var, or "development" if unset.

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    # Instantiating runs the production guards (DATABASE_URL, SECRET_KEY)
    app.config.from_object(config[config_name]())

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    # ── Extensions ───────────────────────────────────────────────────────
    db.init_app(app)
    migrate.init_app(app, db)
    origins = [o.strip() for o in app.config.get("CORS_ORIGINS", "").split(",") if o.strip()]
    if origins == ["*"]:
        CORS(app)
    else:
        CORS(app, origins=origins, supports_credentials=True)

    # ── Request middleware ───────────────────────────────────────────────
    init_request_timing(app)
    _init_request_guard(app)

    # ── Import all models so Alembic and create_all see them ─────────────
    from finishline.models import change as _change_models                  # noqa: F401
    from finishline.models import change_request as _change_request_models  # noqa: F401
    from finishline.models import user as _user_models                      # noqa: F401
    from finishline.models import wbs as _wbs_models                        # noqa: F401

    # ── Auto-create tables (CREATE IF NOT EXISTS) ────────────────────────
    os.makedirs(app.instance_path, exist_ok=True)
    with app.app_context():
        db.create_all()

    # ── Blueprints & error handlers ──────────────────────────────────────
    from finishline.blueprints import register_blueprints
    from finishline.utils.errors import register_error_handlers

    register_blueprints(app)
    register_error_handlers(app)

    # ── CLI commands ─────────────────────────────────────────────────────
    _register_cli(app)

    logger.debug("FinishLine app created config=%s", config_name)
    return app
