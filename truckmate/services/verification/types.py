"""
Result types returned by the verification workflow and the access gate.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from truckmate.models import (
    DriverProfile,
    RequestStatus,
    User,
    VerificationRequest,
    VerificationStatus,
)

UNKNOWN_DRIVER = "Unknown Driver"
NOT_AVAILABLE = "N/A"


@dataclass
class SubmissionResult:
    """Outcome of a profile submission or edit."""
    profile: DriverProfile
    verification_triggered: bool
    request: Optional[VerificationRequest] = None
    created: bool = False


@dataclass
class DecisionResult:
    """Outcome of an admin decision."""
    request: VerificationRequest
    profile: DriverProfile


@dataclass
class DriverSummary:
    """Identity of the driver behind a request (placeholders if missing)."""
    found: bool
    name: str = UNKNOWN_DRIVER
    email: str = NOT_AVAILABLE
    phone: str = NOT_AVAILABLE

    @classmethod
    def from_user(cls, user: Optional[User]) -> "DriverSummary":
        if user is None:
            return cls(found=False)
        return cls(
            found=True,
            name=user.name or UNKNOWN_DRIVER,
            email=user.email or NOT_AVAILABLE,
            phone=user.phone or NOT_AVAILABLE,
        )


@dataclass
class ProfileSummary:
    """Reviewable profile attributes (placeholders if missing)."""
    found: bool
    name: str = NOT_AVAILABLE
    license_number: str = NOT_AVAILABLE
    license_expiry_date: Optional[date] = None
    experience: str = NOT_AVAILABLE
    location: str = NOT_AVAILABLE
    gender: str = NOT_AVAILABLE
    age: Optional[int] = None
    known_truck_types: list[str] = field(default_factory=list)
    verification_status: Optional[VerificationStatus] = None
    resubmission_count: int = 0

    @classmethod
    def from_profile(cls, profile: Optional[DriverProfile]) -> "ProfileSummary":
        if profile is None:
            return cls(found=False)
        return cls(
            found=True,
            name=profile.name or NOT_AVAILABLE,
            license_number=profile.license_number or NOT_AVAILABLE,
            license_expiry_date=profile.license_expiry_date,
            experience=profile.experience or NOT_AVAILABLE,
            location=profile.location or NOT_AVAILABLE,
            gender=profile.gender or NOT_AVAILABLE,
            age=profile.age,
            known_truck_types=list(profile.known_truck_types or []),
            verification_status=profile.verification_status,
            resubmission_count=profile.resubmission_count or 0,
        )


@dataclass
class ReviewItem:
    """A verification request joined with its driver and profile."""
    id: UUID
    driver_id: str
    status: RequestStatus
    priority: str
    created_at: datetime
    processed_at: Optional[datetime]
    processed_by: Optional[str]
    notes: Optional[str]
    documents: dict[str, Optional[str]]
    driver: DriverSummary
    profile: ProfileSummary

    @classmethod
    def build(
        cls,
        request: VerificationRequest,
        user: Optional[User],
        profile: Optional[DriverProfile],
    ) -> "ReviewItem":
        priority = request.priority
        return cls(
            id=request.id,
            driver_id=request.driver_id,
            status=request.status,
            priority=getattr(priority, "value", priority),
            created_at=request.created_at,
            processed_at=request.processed_at,
            processed_by=request.processed_by,
            notes=request.notes,
            documents=request.documents,
            driver=DriverSummary.from_user(user),
            profile=ProfileSummary.from_profile(profile),
        )


@dataclass
class VerificationStats:
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    cancelled: int = 0

    @property
    def total(self) -> int:
        return self.pending + self.approved + self.rejected + self.cancelled


class AccessCode(str, Enum):
    """Reasons the access gate can deny a user, in evaluation order."""
    USER_NOT_FOUND = "USER_NOT_FOUND"
    NO_PROFILE = "NO_PROFILE"
    INCOMPLETE_PROFILE = "INCOMPLETE_PROFILE"
    VERIFICATION_PENDING = "VERIFICATION_PENDING"
    VERIFICATION_REJECTED = "VERIFICATION_REJECTED"
    NOT_VERIFIED = "NOT_VERIFIED"


@dataclass
class AccessDecision:
    """Allow, or deny with a code and a user-facing message."""
    allowed: bool
    code: Optional[AccessCode] = None
    message: str = "Access granted"
    verification_status: Optional[VerificationStatus] = None
    rejection_reason: Optional[str] = None
    redirect_to: Optional[str] = None

    @classmethod
    def allow(cls, verification_status: Optional[VerificationStatus] = None) -> "AccessDecision":
        return cls(allowed=True, verification_status=verification_status)

    @classmethod
    def deny(cls, code: AccessCode, message: str, **kwargs) -> "AccessDecision":
        return cls(allowed=False, code=code, message=message, **kwargs)
