"""
API Errors

Every client-facing failure is an ApiError carrying an HTTP status, a stable
machine-readable `error` code and a human readable `message`. The exception
handlers in `skillswap.main` render them as

    {"error": <code>, "message": <text>, "details": [...]}
"""

from typing import Any, List, Optional


class ApiError(Exception):
    """Base class for errors that are returned to the caller as-is."""

    status_code = 500
    error = "internal_error"

    def __init__(self, message: str, error: Optional[str] = None,
                 details: Optional[List[Any]] = None):
        super().__init__(message)
        self.message = message
        if error:
            self.error = error
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.error, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationFailed(ApiError):
    status_code = 400
    error = "validation_failed"


class BadRequest(ApiError):
    """State-precondition failures: self-targeting, duplicates, non-pending requests."""
    status_code = 400
    error = "invalid_request"


class AuthenticationError(ApiError):
    status_code = 401
    error = "authentication_required"


class PermissionDenied(ApiError):
    status_code = 403
    error = "access_denied"


class NotFound(ApiError):
    status_code = 404
    error = "not_found"


class ServiceUnavailable(ApiError):
    status_code = 503
    error = "database_unavailable"
