"""
Driver profile model for TruckMate.
"""
from datetime import date, datetime
from typing import Optional

from sqlalchemy import String, Integer, Boolean, Date, DateTime, Enum
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from truckmate.models.base import BaseModel
from truckmate.models.enums import VerificationStatus, enum_values


class DriverProfile(BaseModel):
    """
    Driver profile with documents and verification lifecycle fields.

    One profile per user (``user_id`` is the identity provider subject).
    ``verification_status`` is only meaningful once ``profile_completed``
    is set.

    Attributes:
        name: Driver's full name (critical: edits re-open review)
        known_truck_types: Truck category tags (critical)
        license_photo_front: Front license photo URL (critical)
        license_photo_back: Back license photo URL (critical)
        resubmission_count: Number of review cycles that ended in rejection
    """
    __tablename__ = "driver_profiles"

    user_id: Mapped[str] = mapped_column(
        String(128),
        unique=True,
        nullable=False,
        index=True,
    )

    # Submitted attributes
    name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    license_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    license_expiry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    known_truck_types: Mapped[list[str]] = mapped_column(
        ARRAY(String(50)),
        nullable=False,
        default=list,
    )
    experience: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    gender: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    age: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    # Document references (URLs into blob storage)
    profile_photo: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    license_photo_front: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    license_photo_back: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    # Lifecycle
    profile_completed: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    verification_status: Mapped[VerificationStatus] = mapped_column(
        Enum(
            VerificationStatus,
            name="verification_status",
            create_type=False,
            values_callable=enum_values,
        ),
        nullable=False,
        default=VerificationStatus.PENDING,
    )

    verification_requested_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    approved_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    approved_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    rejection_reason: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    resubmission_count: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )

    @property
    def is_approved(self) -> bool:
        return self.profile_completed and self.verification_status == VerificationStatus.APPROVED

    def documents(self) -> dict[str, Optional[str]]:
        """Current document URLs keyed by field name."""
        return {
            "profile_photo": self.profile_photo,
            "license_photo_front": self.license_photo_front,
            "license_photo_back": self.license_photo_back,
        }

    def __repr__(self) -> str:
        return (
            f"<DriverProfile(user_id={self.user_id!r}, "
            f"status={self.verification_status}, completed={self.profile_completed})>"
        )
