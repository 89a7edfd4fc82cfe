"""
Verification request model for TruckMate.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import String, Text, DateTime, Enum, ForeignKey, Index, text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from truckmate.models.base import BaseModel
from truckmate.models.enums import RequestStatus, RequestPriority, enum_values


class VerificationRequest(BaseModel):
    """
    One admin review cycle for a driver profile.

    Document URLs are copied at creation time so later profile edits do not
    alter a request that is already under review. Requests are never
    deleted; superseded ones are marked cancelled.
    """
    __tablename__ = "verification_requests"
    __table_args__ = (
        Index("ix_verification_requests_driver_status", "driver_id", "status"),
        Index("ix_verification_requests_status_created", "status", "created_at"),
        # At most one open request per driver
        Index(
            "uq_verification_requests_one_pending",
            "driver_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
        ),
    )

    driver_id: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
    )

    profile_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("driver_profiles.id", ondelete="SET NULL"),
        nullable=True,
    )

    status: Mapped[RequestStatus] = mapped_column(
        Enum(RequestStatus, name="request_status", create_type=False, values_callable=enum_values),
        nullable=False,
        default=RequestStatus.PENDING,
    )

    priority: Mapped[RequestPriority] = mapped_column(
        Enum(RequestPriority, name="request_priority", create_type=False, values_callable=enum_values),
        nullable=False,
        default=RequestPriority.MEDIUM,
    )

    # Document snapshot
    snapshot_profile_photo: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    snapshot_license_photo_front: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    snapshot_license_photo_back: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    processed_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    processed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    @property
    def documents(self) -> dict[str, Optional[str]]:
        return {
            "profile_photo": self.snapshot_profile_photo,
            "license_photo_front": self.snapshot_license_photo_front,
            "license_photo_back": self.snapshot_license_photo_back,
        }

    def __repr__(self) -> str:
        return (
            f"<VerificationRequest(id={self.id}, driver_id={self.driver_id!r}, "
            f"status={self.status})>"
        )
