"""Domain errors raised by services and mapped to HTTP responses in main.

Each error carries a stable `code`, the HTTP status it maps to, a
user-facing message, and an optional structured detail.
"""

from typing import Any


class ServiceError(Exception):
    """Base class for expected, user-visible failures."""

    code = "SERVICE_ERROR"
    status_code = 400

    def __init__(self, message: str, detail: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class ValidationError(ServiceError):
    """Malformed input. `detail["fields"]` lists field-level messages."""

    code = "VALIDATION_FAILED"
    status_code = 400

    def __init__(self, message: str, fields: dict[str, str] | None = None) -> None:
        detail = None
        if fields:
            detail = {"fields": [{"field": k, "message": v} for k, v in fields.items()]}
        super().__init__(message, detail)
        self.fields = fields or {}


class NotFoundError(ServiceError):
    """Referenced store, user or rating does not exist."""

    code = "NOT_FOUND"
    status_code = 404


class ConflictError(ServiceError):
    """Duplicate submission of a uniquely keyed row.

    Reported as 400 to match the established API contract.
    """

    code = "CONFLICT"
    status_code = 400


class AuthenticationError(ServiceError):
    """Missing, invalid or expired credentials."""

    code = "UNAUTHORIZED"
    status_code = 401


class PermissionDeniedError(ServiceError):
    """Authenticated, but the role may not perform the operation."""

    code = "FORBIDDEN"
    status_code = 403
