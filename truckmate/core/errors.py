"""
Domain error taxonomy.

Services raise these; the exception handlers in ``truckmate.main`` turn
them into structured JSON responses. Nothing below this layer knows about
HTTP beyond the status code hint carried on each class.
"""
from typing import Any, Optional


class ErrorCode:
    """Machine readable error codes returned to clients."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    PRECONDITION_FAILED = "PRECONDITION_FAILED"
    ALREADY_PROCESSED = "ALREADY_PROCESSED"
    CONFLICT = "CONFLICT"
    DEPENDENCY_ERROR = "DEPENDENCY_ERROR"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class AppError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = 500
    code: str = ErrorCode.INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        details: Optional[Any] = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": False,
            "message": self.message,
            "error": {"code": self.code, "details": self.details},
        }


class ValidationError(AppError):
    """Missing or malformed input. Never retried automatically."""

    status_code = 422
    code = ErrorCode.VALIDATION_ERROR


class AuthenticationError(AppError):
    """Credential missing, malformed or rejected by the identity provider."""

    status_code = 401
    code = ErrorCode.UNAUTHORIZED


class TokenExpiredError(AuthenticationError):
    code = ErrorCode.TOKEN_EXPIRED


class PermissionDeniedError(AppError):
    status_code = 403
    code = ErrorCode.FORBIDDEN


class NotFoundError(AppError):
    status_code = 404
    code = ErrorCode.NOT_FOUND


class PreconditionFailedError(AppError):
    """Operation not allowed in the current workflow state.

    ``condition`` names the precondition that did not hold.
    """

    status_code = 409
    code = ErrorCode.PRECONDITION_FAILED

    def __init__(self, message: str, *, condition: str, **kwargs: Any):
        kwargs.setdefault("details", {"condition": condition})
        super().__init__(message, **kwargs)
        self.condition = condition


class AlreadyProcessedError(PreconditionFailedError):
    code = ErrorCode.ALREADY_PROCESSED

    def __init__(self, message: str = "Request already processed"):
        super().__init__(message, condition="request_pending")


class ConflictError(AppError):
    """Concurrent mutation on the same driver. Safe to retry once."""

    status_code = 409
    code = ErrorCode.CONFLICT


class DependencyError(AppError):
    """Backing store unavailable."""

    status_code = 503
    code = ErrorCode.DEPENDENCY_ERROR
