"""Domain error taxonomy.

Learn: Services raise these instead of HTTPException so they stay usable
outside a request (CLI, scripts, tests). The API layer maps each class to
its status code in one place — see taskboard.api.errors.
"""


class TaskboardError(Exception):
    """Base class for expected, user-visible failures."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TaskboardError):
    """Bad or missing input."""

    status_code = 400


class AuthenticationError(TaskboardError):
    """Missing credentials or credentials that don't match."""

    status_code = 401


class AuthorizationError(TaskboardError):
    """Credential presented but rejected (bad signature, expired)."""

    status_code = 403


class NotFoundError(TaskboardError):
    """Entity absent, or not visible to the requester."""

    status_code = 404
