"""
User lookups shared by the change-request and work-package services.
"""

from finishline.core.exceptions import NotFoundError
from finishline.models import db
from finishline.models.user import User


def get_user_or_404(user_id: int, session=None) -> User:
    session = session or db.session
    user = session.get(User, user_id)
    if not user:
        raise NotFoundError("User", user_id)
    return user


def get_user_full_name(user_id: int | None, session=None) -> str | None:
    """Display name for audit text; None when the id is unset or unknown."""
    if user_id is None:
        return None
    user = (session or db.session).get(User, user_id)
    return user.full_name if user else None


def list_users(session=None) -> list[User]:
    session = session or db.session
    return session.query(User).order_by(User.id).all()
