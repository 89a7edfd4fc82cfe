"""
Driver profile Pydantic schemas.
"""
from datetime import date, datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import Field, field_validator

from truckmate.models import VerificationStatus
from truckmate.schemas.base import BaseSchema


class DriverProfileFields(BaseSchema):
    """Submitted profile attributes (all optional; only supplied ones apply)."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    license_number: Optional[str] = Field(None, min_length=1, max_length=50)
    license_expiry_date: Optional[date] = None
    known_truck_types: Optional[list[str]] = None
    experience: Optional[str] = Field(None, max_length=100)
    gender: Optional[str] = Field(None, max_length=20)
    age: Optional[int] = Field(None, ge=18, le=100)
    location: Optional[str] = Field(None, max_length=200)

    @field_validator("name", "license_number", "experience", "gender", "location", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("known_truck_types", mode="before")
    @classmethod
    def split_truck_types(cls, v: Any) -> Any:
        """Accept a list, repeated form values or one comma separated string."""
        if v is None:
            return v
        if isinstance(v, str):
            v = [v]
        tags: list[str] = []
        for item in v:
            tags.extend(part.strip() for part in str(item).split(","))
        return [tag for tag in tags if tag]

    def changes(self) -> dict[str, Any]:
        """Only the fields the client actually sent."""
        return self.model_dump(exclude_unset=True, by_alias=False)


class DriverProfileResponse(BaseSchema):
    """Schema for driver profile response."""
    id: UUID
    user_id: str
    name: Optional[str] = None
    license_number: Optional[str] = None
    license_expiry_date: Optional[date] = None
    known_truck_types: list[str] = Field(default_factory=list)
    experience: Optional[str] = None
    gender: Optional[str] = None
    age: Optional[int] = None
    location: Optional[str] = None
    profile_photo: Optional[str] = None
    license_photo_front: Optional[str] = None
    license_photo_back: Optional[str] = None
    profile_completed: bool
    verification_status: VerificationStatus
    verification_requested_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    resubmission_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProfileSubmissionResponse(BaseSchema):
    """Result of a profile create or update."""
    profile: DriverProfileResponse
    requires_verification: bool
    message: str


class AvailabilityUpdate(BaseSchema):
    is_available: bool


class AvailabilityResponse(BaseSchema):
    success: bool = True
    message: str
    is_available: bool
