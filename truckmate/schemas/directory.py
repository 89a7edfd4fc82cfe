"""
Admin console user directory schemas.
"""
from datetime import datetime
from typing import Optional

from pydantic import Field

from truckmate.models import UserRole, VerificationStatus
from truckmate.schemas.base import BaseSchema
from truckmate.schemas.verification import StatsCounts
from truckmate.services.directory import DirectoryEntry


class DirectoryProfile(BaseSchema):
    license_number: Optional[str] = None
    experience: Optional[str] = None
    location: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    known_truck_types: list[str] = Field(default_factory=list)
    profile_photo: Optional[str] = None
    verification_status: VerificationStatus


class DirectoryUser(BaseSchema):
    """A user with their driver profile, if any."""
    id: str
    name: str
    email: Optional[str] = None
    phone: str
    photo_url: Optional[str] = None
    role: UserRole
    is_available: bool = False
    created_at: Optional[datetime] = None
    profile: Optional[DirectoryProfile] = None

    @classmethod
    def from_entry(cls, entry: DirectoryEntry) -> "DirectoryUser":
        user = entry.user
        return cls(
            id=user.subject_id,
            name=user.name,
            email=user.email,
            phone=user.phone,
            photo_url=entry.photo_url,
            role=user.role,
            is_available=bool(user.is_available),
            created_at=user.created_at,
            profile=(
                DirectoryProfile.model_validate(entry.profile)
                if entry.profile is not None else None
            ),
        )


class DriverListResponse(BaseSchema):
    success: bool = True
    drivers: list[DirectoryUser]


class DashboardStatistics(BaseSchema):
    total_users: int
    total_drivers: int
    total_owners: int
    active_drivers: int


class DashboardResponse(BaseSchema):
    success: bool = True
    statistics: DashboardStatistics
    verification: StatsCounts
    recent_users: list[DirectoryUser]
