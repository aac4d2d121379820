"""Standardised API error responses.

Usage
-----
    from finishline.utils.errors import api_error, E

    return api_error(E.NOT_FOUND, "Change request #4 not found")
    return api_error(E.VALIDATION_INVALID, "Invalid request body", details={"errors": [...]})
"""

from __future__ import annotations

from flask import jsonify


# ── Error code constants ──────────────────────────────────────────────
class E:
    """Machine-readable error code constants."""

    # Validation – HTTP 400
    VALIDATION_INVALID = "ERR_VALIDATION_INVALID"

    # Not-found – HTTP 404
    NOT_FOUND = "ERR_NOT_FOUND"

    # State conflict (already reviewed, missing selection) – HTTP 400
    CONFLICT_STATE = "ERR_CONFLICT_STATE"

    # Permissions – HTTP 401
    FORBIDDEN = "ERR_FORBIDDEN"

    # Server – HTTP 500
    DATABASE = "ERR_DATABASE"
    INTERNAL = "ERR_INTERNAL"


# ── Default HTTP status mapping ───────────────────────────────────────
_DEFAULT_STATUS: dict[str, int] = {
    E.VALIDATION_INVALID: 400,
    E.NOT_FOUND: 404,
    E.CONFLICT_STATE: 400,
    E.FORBIDDEN: 401,
    E.DATABASE: 500,
    E.INTERNAL: 500,
}


def api_error(
    code: str,
    message: str,
    *,
    status: int | None = None,
    details: dict | None = None,
):
    """Return a standard JSON error response.

    Parameters
    ----------
    code : str
        Machine-readable error code (use ``E.*`` constants).
    message : str
        Human-readable explanation for developers / UI.
    status : int, optional
        HTTP status override.  Falls back to ``_DEFAULT_STATUS[code]``,
        then to ``400``.
    details : dict, optional
        Extra structured payload merged into the body (e.g. ``errors``).

    Returns
    -------
    tuple[Response, int]
        ``(jsonify(body), http_status)`` – drop-in for Flask views.
    """

    http_status = status or _DEFAULT_STATUS.get(code, 400)

    body: dict = {
        "message": message,
        "code": code,
    }
    if details:
        body.update(details)

    return jsonify(body), http_status


# ── App-wide handlers for the platform exception hierarchy ────────────

def register_error_handlers(app):
    """Map ``finishline.core.exceptions`` and DB failures to JSON responses."""
    import logging

    from flask import request
    from sqlalchemy.exc import SQLAlchemyError
    from werkzeug.exceptions import HTTPException

    from finishline.core.exceptions import (
        ForbiddenError,
        NotFoundError,
        StateConflictError,
        ValidationError,
    )
    from finishline.models import db

    logger = logging.getLogger(__name__)

    @app.errorhandler(ValidationError)
    def _handle_validation(error: ValidationError):
        return api_error(E.VALIDATION_INVALID, str(error), details={"errors": error.errors})

    @app.errorhandler(NotFoundError)
    def _handle_not_found(error: NotFoundError):
        return api_error(E.NOT_FOUND, str(error))

    @app.errorhandler(ForbiddenError)
    def _handle_forbidden(error: ForbiddenError):
        logger.warning("Access denied: user=%s endpoint=%s", error.user_id, request.endpoint)
        return api_error(E.FORBIDDEN, str(error))

    @app.errorhandler(StateConflictError)
    def _handle_state_conflict(error: StateConflictError):
        return api_error(E.CONFLICT_STATE, str(error))

    @app.errorhandler(SQLAlchemyError)
    def _handle_database(error: SQLAlchemyError):
        db.session.rollback()
        logger.exception("Database error endpoint=%s", request.endpoint)
        return api_error(E.DATABASE, "Database error")

    @app.errorhandler(404)
    def _handle_404(error):
        return api_error(E.NOT_FOUND, "Not found", details={"path": request.path})

    @app.errorhandler(405)
    def _handle_405(error):
        return api_error(E.VALIDATION_INVALID, "Method not allowed", status=405)

    @app.errorhandler(Exception)
    def _handle_unexpected(error: Exception):
        if isinstance(error, HTTPException):
            return api_error(E.INTERNAL, error.description or error.name, status=error.code)
        logger.exception("Unexpected error endpoint=%s", request.endpoint)
        return api_error(E.INTERNAL, "Internal server error")
