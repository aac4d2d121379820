"""
Platform-wide exception hierarchy.

Services raise these types; blueprints register one handler per type and
get consistent HTTP status codes everywhere.

Usage:
    from finishline.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Change request", resource_id=42)
    raise ValidationError([{"param": "crId", "msg": "must be an integer >= 0"}])
"""


class NotFoundError(Exception):
    """Raised when a referenced entity does not exist.

    Maps to HTTP 404.

    Args:
        resource: Human-readable entity name (e.g. "User", "WBS element").
        resource_id: The key that was looked up (id or WBS number).
        message: Full message override.
    """

    def __init__(self, resource: str, resource_id: int | str | None = None,
                 message: str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        if message is None:
            message = f"{resource}"
            if resource_id is not None:
                message += f" #{resource_id}"
            message += " not found"
        super().__init__(message)


class ValidationError(Exception):
    """Raised when a request body fails shape / type validation.

    Maps to HTTP 400. Carries every violated rule, not just the first.

    Args:
        errors: List of ``{"param", "msg", "value"}`` dicts.
        message: Summary line for the response body.
    """

    def __init__(self, errors: list[dict], message: str = "Invalid request body") -> None:
        self.errors = errors
        super().__init__(message)


class ForbiddenError(Exception):
    """Raised when the acting user lacks privilege, or reviews their own CR.

    Maps to HTTP 401 (the API's historical contract for access denial).
    """

    def __init__(self, message: str = "Access Denied", user_id: int | None = None) -> None:
        self.user_id = user_id
        super().__init__(message)


class StateConflictError(Exception):
    """Raised when an operation is not allowed in the entity's current state.

    Examples: reviewing an already-decided change request, accepting a
    scope change request without a valid proposed solution.

    Maps to HTTP 400.
    """
