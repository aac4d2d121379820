"""
Logging setup for the FinishLine API.

- Development: coloured single-line records
- Production: one JSON object per record
- Level from app.config["LOG_LEVEL"] (env LOG_LEVEL)

Every record emitted inside a request carries the request id set by the
timing middleware, so service logs can be joined to the access log.
"""

import json
import logging
import sys
from datetime import datetime, timezone

from flask import g, has_request_context

# Attributes copied from ``extra=`` into the JSON record when present
_EXTRA_KEYS = (
    "request_id",
    "method",
    "path",
    "status",
    "duration_ms",
    "remote_addr",
    "cr_id",
    "user_id",
    "wbs_num",
    "channel",
)


class RequestIdFilter(logging.Filter):
    """Stamp ``record.request_id`` from ``flask.g`` when a request is active."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None and has_request_context():
            record.request_id = getattr(g, "request_id", None)
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "where": f"{record.module}:{record.lineno}",
        }
        entry.update(
            {key: getattr(record, key) for key in _EXTRA_KEYS if getattr(record, key, None) is not None}
        )
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class ReadableFormatter(logging.Formatter):
    """Coloured formatter for a developer terminal."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        rid = getattr(record, "request_id", None)
        rid_str = f" ({rid})" if rid else ""
        line = f"{color}{ts} {record.levelname:<8}{self.RESET} {record.name}{rid_str}: {record.getMessage()}"
        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(app):
    """Install a single stderr handler on the root logger.

    JSON output unless the app runs in DEBUG or TESTING mode.
    """
    is_testing = app.config.get("TESTING", False)
    use_json = not app.config.get("DEBUG", False) and not is_testing

    level_name = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if use_json else ReadableFormatter())
    handler.addFilter(RequestIdFilter())
    handler.setLevel(level)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for noisy in ("urllib3", "werkzeug", "sqlalchemy.engine", "alembic"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    app.logger.setLevel(level)
    if not is_testing:
        app.logger.info("Logging configured: level=%s format=%s", level_name, "json" if use_json else "readable")
