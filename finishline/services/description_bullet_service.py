"""
FinishLine
Description bullet check-off and list updates.

A bullet is either unchecked, or checked by one user at one moment. Checking
an already-checked bullet clears it again.
"""

import logging
from datetime import datetime, timezone

from finishline.core.exceptions import NotFoundError, StateConflictError
from finishline.models import db
from finishline.models.wbs import DescriptionBullet
from finishline.services.permission import require_privilege
from finishline.services.user_service import get_user_or_404
from finishline.utils.helpers import transaction

logger = logging.getLogger(__name__)


def check_description_bullet(*, user_id: int, description_id: int, session=None) -> DescriptionBullet:
    """Toggle the checked state of a live bullet."""
    session = session or db.session
    user = get_user_or_404(user_id, session)
    require_privilege(user, "MEMBER")

    bullet = session.get(DescriptionBullet, description_id)
    if bullet is None:
        raise NotFoundError("Description bullet", description_id)
    if bullet.is_deleted:
        raise StateConflictError("Cannot check a deleted description bullet")

    with transaction(session):
        if bullet.date_time_checked is None:
            bullet.date_time_checked = datetime.now(timezone.utc)
            bullet.user_checked_id = user.id
        else:
            bullet.date_time_checked = None
            bullet.user_checked_id = None

    logger.info("Description bullet #%s checked=%s by user=%s",
                bullet.id, bullet.date_time_checked is not None, user.id,
                extra={"user_id": user.id})
    return bullet


def apply_bullet_diff(diff, bullets, owner_column: str, owner_id: int, session=None):
    """Persist a ``BulletDiff`` against the live ``bullets`` of one owning list.

    Removed bullets are soft-deleted; added ones are attached through
    ``owner_column`` (e.g. ``project_id_goals``).
    """
    session = session or db.session
    now = datetime.now(timezone.utc)
    by_id = {b.id: b for b in bullets}
    for bullet_id in diff.deleted_ids:
        by_id[bullet_id].date_deleted = now
    for edit in diff.edited_ids_and_details:
        by_id[edit["id"]].detail = edit["detail"]
    for detail in diff.added_details:
        session.add(DescriptionBullet(detail=detail, **{owner_column: owner_id}))
