"""Shared utility functions.

parse_date:      lenient date parsing (returns None on bad input)
parse_wbs_num:   "1.2.0" → {"carNumber": 1, ...} (raises ValueError)
transaction:     unit-of-work boundary used by every lifecycle operation
"""
import logging
import re
from contextlib import contextmanager
from datetime import date, datetime

from finishline.models import db

logger = logging.getLogger(__name__)

_WBS_NUM_RE = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")


def parse_date(value):
    """Parse a date string (ISO or DD.MM.YYYY) to a date object.

    Returns None for empty/invalid input. Supports:
    - YYYY-MM-DD (ISO format)
    - YYYY-MM-DDTHH:MM:SS[.fff][Z|±HH:MM] (datetime ISO → .date())
    - DD.MM.YYYY
    """
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except (ValueError, TypeError):
        pass
    try:
        return datetime.fromisoformat(str(value)).date()
    except (ValueError, TypeError):
        pass
    try:
        return datetime.strptime(str(value), "%d.%m.%Y").date()
    except (ValueError, TypeError):
        return None


def parse_wbs_num(wbs_string: str) -> dict:
    """Parse a ``car.project.workPackage`` string into a WBS number dict.

    Raises:
        ValueError: if the string is not three dot-separated integers.
    """
    match = _WBS_NUM_RE.match(wbs_string or "")
    if not match:
        raise ValueError(f"{wbs_string} is not a valid WBS #!")
    car, project, work_package = (int(part) for part in match.groups())
    return {"carNumber": car, "projectNumber": project, "workPackageNumber": work_package}


# ── Unit of work ─────────────────────────────────────────────────────────────

@contextmanager
def transaction(session=None):
    """Run a block of reads/writes as one all-or-nothing unit.

    Commits when the block exits cleanly; rolls back and re-raises on any
    exception so a half-applied review or edit is never persisted.

    Usage::

        with transaction(self.session) as session:
            session.add(cr)
            write_changes(changes, session)
    """
    session = session or db.session
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.debug("Transaction rolled back")
        raise
