"""Tests for truckmate.core.errors -- error taxonomy and envelope."""
import pytest

from truckmate.core.errors import (
    AlreadyProcessedError,
    AppError,
    AuthenticationError,
    ConflictError,
    DependencyError,
    NotFoundError,
    PermissionDeniedError,
    PreconditionFailedError,
    TokenExpiredError,
    ValidationError,
)


class TestStatusCodes:

    @pytest.mark.parametrize("error_cls, status_code, code", [
        (ValidationError, 422, "VALIDATION_ERROR"),
        (AuthenticationError, 401, "UNAUTHORIZED"),
        (TokenExpiredError, 401, "TOKEN_EXPIRED"),
        (PermissionDeniedError, 403, "FORBIDDEN"),
        (NotFoundError, 404, "NOT_FOUND"),
        (ConflictError, 409, "CONFLICT"),
        (DependencyError, 503, "DEPENDENCY_ERROR"),
    ])
    def test_mapping(self, error_cls, status_code, code):
        error = error_cls("boom")
        assert error.status_code == status_code
        assert error.code == code


class TestEnvelope:

    def test_to_dict(self):
        error = NotFoundError("Profile not found", details={"id": "x"})
        assert error.to_dict() == {
            "success": False,
            "message": "Profile not found",
            "error": {"code": "NOT_FOUND", "details": {"id": "x"}},
        }

    def test_code_override(self):
        error = PermissionDeniedError("pending", code="VERIFICATION_PENDING")
        assert error.code == "VERIFICATION_PENDING"
        assert PermissionDeniedError.code == "FORBIDDEN"


class TestPreconditionFailed:

    def test_condition_in_details(self):
        error = PreconditionFailedError("nope", condition="status_rejected")
        assert error.status_code == 409
        assert error.condition == "status_rejected"
        assert error.details == {"condition": "status_rejected"}

    def test_explicit_details_kept(self):
        error = PreconditionFailedError(
            "nope",
            condition="no_pending_request",
            details={"condition": "no_pending_request", "existingRequestId": "r1"},
        )
        assert error.details["existingRequestId"] == "r1"

    def test_already_processed(self):
        error = AlreadyProcessedError()
        assert isinstance(error, PreconditionFailedError)
        assert isinstance(error, AppError)
        assert error.code == "ALREADY_PROCESSED"
        assert error.message == "Request already processed"
