"""
Domain error taxonomy.

Services raise these; the exception handlers in ``responses`` translate each
one to a fixed HTTP status and error code.
"""
from typing import Any, Dict, Optional


class BlogError(Exception):
    """Base class for all domain errors."""

    status_code = 500
    error_code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str = "internal server error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(BlogError):
    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, resource: str = "resource"):
        super().__init__(f"{resource} not found")


class ConflictError(BlogError):
    status_code = 409
    error_code = "CONFLICT"


class ValidationFailedError(BlogError):
    status_code = 400
    error_code = "VALIDATION_ERROR"


class InvalidStateError(BlogError):
    """The target exists but is in a state that forbids the operation."""

    status_code = 400
    error_code = "BAD_REQUEST"


class PermissionDeniedError(BlogError):
    status_code = 403
    error_code = "FORBIDDEN"


class UnauthorizedError(BlogError):
    status_code = 401
    error_code = "UNAUTHORIZED"
