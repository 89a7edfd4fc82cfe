"""
Verification request Pydantic schemas.
"""
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from truckmate.models import RequestStatus, VerificationRequest, VerificationStatus
from truckmate.schemas.base import BaseSchema
from truckmate.services.verification.types import VerificationStats


class VerificationRequestInfo(BaseSchema):
    """Latest request as shown to the driver."""
    id: UUID
    status: RequestStatus
    submitted_at: datetime
    processed_at: Optional[datetime] = None
    notes: Optional[str] = None

    @classmethod
    def from_request(cls, request: VerificationRequest) -> "VerificationRequestInfo":
        return cls(
            id=request.id,
            status=request.status,
            submitted_at=request.created_at,
            processed_at=request.processed_at,
            notes=request.notes,
        )


class VerificationStatusResponse(BaseSchema):
    profile_exists: bool
    verification_status: str
    can_access_jobs: bool
    profile_completed: bool
    verification_request: Optional[VerificationRequestInfo] = None


class AccessCheckResponse(BaseSchema):
    can_access_jobs: bool
    verification_status: str
    message: str
    code: Optional[str] = None


class ResubmitResponse(BaseSchema):
    success: bool = True
    message: str = "Verification resubmitted successfully"
    request_id: UUID


class ProcessRequest(BaseSchema):
    """Admin decision on a pending request."""
    action: str = Field(..., description="'approved' or 'rejected'")
    notes: Optional[str] = Field(None, max_length=1000)


class ProcessResponse(BaseSchema):
    success: bool = True
    message: str
    request_id: UUID
    profile_id: UUID
    status: RequestStatus


class DocumentSnapshot(BaseSchema):
    profile_photo: Optional[str] = None
    license_photo_front: Optional[str] = None
    license_photo_back: Optional[str] = None


class DriverSummaryResponse(BaseSchema):
    found: bool
    name: str
    email: str
    phone: str


class ProfileSummaryResponse(BaseSchema):
    found: bool
    name: str
    license_number: str
    license_expiry_date: Optional[date] = None
    experience: str
    location: str
    gender: str
    age: Optional[int] = None
    known_truck_types: list[str] = Field(default_factory=list)
    verification_status: Optional[VerificationStatus] = None
    resubmission_count: int = 0


class ReviewItemResponse(BaseSchema):
    """A request joined with its driver and profile for admin review."""
    id: UUID
    driver_id: str
    status: RequestStatus
    priority: str
    created_at: datetime
    processed_at: Optional[datetime] = None
    processed_by: Optional[str] = None
    notes: Optional[str] = None
    documents: DocumentSnapshot
    driver: DriverSummaryResponse
    profile: ProfileSummaryResponse


class StatsCounts(BaseSchema):
    pending: int
    approved: int
    rejected: int
    cancelled: int
    total: int

    @classmethod
    def from_stats(cls, stats: VerificationStats) -> "StatsCounts":
        return cls(
            pending=stats.pending,
            approved=stats.approved,
            rejected=stats.rejected,
            cancelled=stats.cancelled,
            total=stats.total,
        )


class StatsResponse(BaseSchema):
    success: bool = True
    stats: StatsCounts
