"""
Health check blueprint.

Endpoints:
    GET /api/v1/health/ready  -> 200 while the process is up
    GET /api/v1/health/live   -> database round trip; 503 when it fails
"""

import logging
import time

from flask import Blueprint, current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError

from finishline.models import db

logger = logging.getLogger(__name__)

health_bp = Blueprint("health_bp", __name__, url_prefix="/api/v1/health")


@health_bp.route("/ready", methods=["GET"])
def ready():
    return jsonify({"status": "ok"}), 200


@health_bp.route("/live", methods=["GET"])
def live():
    """Liveness with database latency."""
    checks = {}
    healthy = True

    try:
        t0 = time.perf_counter()
        db.session.execute(db.text("SELECT 1"))
        checks["database"] = {"status": "ok", "latency_ms": round((time.perf_counter() - t0) * 1000, 1)}
    except SQLAlchemyError as exc:
        db.session.rollback()
        checks["database"] = {"status": "error", "detail": exc.__class__.__name__}
        healthy = False
        logger.error("Health check: database failed: %s", exc)

    checks["app"] = {
        "name": "FinishLine",
        "debug": current_app.debug,
        "testing": current_app.testing,
    }
    return jsonify({
        "status": "healthy" if healthy else "degraded",
        "checks": checks,
    }), 200 if healthy else 503
