"""Custom exceptions for TaskNest.

Every failure raised by the store, the HTTP layer or the sync client is a
subclass of TaskNestError, so callers can handle them uniformly.
"""

from tasknest.utils import exit_codes


class TaskNestError(Exception):
    """Base exception for all TaskNest errors."""

    status_code = 500
    exit_code = exit_codes.ERROR_GENERAL

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__doc__ or ""


class ValidationError(TaskNestError):
    """Raised when required input is missing or malformed."""

    status_code = 400
    exit_code = exit_codes.ERROR_INVALID_ARGS


class NotFoundError(TaskNestError):
    """Raised when a record is absent or not owned by the caller."""

    status_code = 404
    exit_code = exit_codes.ERROR_NOT_FOUND


class Unauthorized(TaskNestError):
    """Raised when the bearer credential is missing or invalid."""

    status_code = 401
    exit_code = exit_codes.ERROR_AUTH_FAILURE


class TransportError(TaskNestError):
    """Raised on network failures and unexpected server responses."""

    status_code = 502
    exit_code = exit_codes.ERROR_NETWORK


class PendingMutationError(TaskNestError):
    """Raised when a task already has a mutation in flight."""

    status_code = 409
