"""
Role-tier privilege checks.

Every operation that needs a minimum role goes through these two helpers
instead of comparing role names inline.

Usage:
    from finishline.services.permission import require_privilege

    require_privilege(reviewer, "LEADERSHIP")   # raises ForbiddenError
    if has_privilege(user, "MEMBER"):
        ...
"""

from finishline.core.exceptions import ForbiddenError
from finishline.models.user import ROLE_TIERS


def has_privilege(user, required_role: str) -> bool:
    """True when the user's role is at or above ``required_role``."""
    return user is not None and ROLE_TIERS.get(user.role, -1) >= ROLE_TIERS[required_role]


def require_privilege(user, required_role: str) -> None:
    if not has_privilege(user, required_role):
        raise ForbiddenError(user_id=getattr(user, "id", None))
