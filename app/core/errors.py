"""Hackathon Core error hierarchy."""

from typing import Any


class HackathonCoreError(Exception):
    """Base exception for service errors."""

    code = "HACKATHON_CORE_INTERNAL_ERROR"
    status_code = 500

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(HackathonCoreError):
    """Invalid request parameters or illegal state transition."""

    code = "HACKATHON_CORE_INVALID_REQUEST"
    status_code = 400


class UnauthorizedError(HackathonCoreError):
    """Missing or rejected credentials."""

    code = "HACKATHON_CORE_UNAUTHORIZED"
    status_code = 401


class ForbiddenError(HackathonCoreError):
    """Caller is authenticated but not allowed to act on the resource."""

    code = "HACKATHON_CORE_FORBIDDEN"
    status_code = 403


class NotFoundError(HackathonCoreError):
    code = "HACKATHON_CORE_NOT_FOUND"
    status_code = 404


class ConflictError(HackathonCoreError):
    code = "HACKATHON_CORE_CONFLICT"
    status_code = 409


class DependencyError(HackathonCoreError):
    """A sibling service (identity, notification) or the database failed."""

    code = "HACKATHON_CORE_DEPENDENCY_FAILURE"
    status_code = 502

    def __init__(
        self,
        message: str,
        dependency: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details={**(details or {}), "dependency": dependency})
        self.dependency = dependency


class InternalError(HackathonCoreError):
    code = "HACKATHON_CORE_INTERNAL_ERROR"
    status_code = 500


ERROR_STATUS_MAP: dict[type[HackathonCoreError], int] = {
    ValidationError: 400,
    UnauthorizedError: 401,
    ForbiddenError: 403,
    NotFoundError: 404,
    ConflictError: 409,
    DependencyError: 502,
    InternalError: 500,
}


def get_status_code(error: HackathonCoreError) -> int:
    """Get HTTP status code for error."""
    return ERROR_STATUS_MAP.get(type(error), error.status_code)
