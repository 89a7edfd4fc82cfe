"""
Pydantic schemas for API request/response validation.
"""

from truckmate.schemas.base import BaseSchema, MessageResponse
from truckmate.schemas.auth import (
    AdminCreate,
    AdminCreated,
    AdminInfo,
    AdminLogin,
    AdminToken,
    AppUserResponse,
    AuthResponse,
    ChangePassword,
    CurrentUserResponse,
    IdTokenLogin,
)
from truckmate.schemas.directory import (
    DashboardResponse,
    DirectoryUser,
    DriverListResponse,
)
from truckmate.schemas.profile import (
    AvailabilityResponse,
    AvailabilityUpdate,
    DriverProfileFields,
    DriverProfileResponse,
    ProfileSubmissionResponse,
)
from truckmate.schemas.verification import (
    AccessCheckResponse,
    ProcessRequest,
    ProcessResponse,
    ResubmitResponse,
    ReviewItemResponse,
    StatsResponse,
    VerificationRequestInfo,
    VerificationStatusResponse,
)

__all__ = [
    # Base
    "BaseSchema",
    "MessageResponse",
    # Auth
    "AdminCreate",
    "AdminCreated",
    "AdminInfo",
    "AdminLogin",
    "AdminToken",
    "AppUserResponse",
    "AuthResponse",
    "ChangePassword",
    "CurrentUserResponse",
    "IdTokenLogin",
    # Directory
    "DashboardResponse",
    "DirectoryUser",
    "DriverListResponse",
    # Profile
    "AvailabilityResponse",
    "AvailabilityUpdate",
    "DriverProfileFields",
    "DriverProfileResponse",
    "ProfileSubmissionResponse",
    # Verification
    "AccessCheckResponse",
    "ProcessRequest",
    "ProcessResponse",
    "ResubmitResponse",
    "ReviewItemResponse",
    "StatsResponse",
    "VerificationRequestInfo",
    "VerificationStatusResponse",
]
