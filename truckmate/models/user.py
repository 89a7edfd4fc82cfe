"""App user model (drivers and truck owners signed in through the identity provider)."""
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Boolean, DateTime, Enum
from sqlalchemy.orm import Mapped, mapped_column

from truckmate.models.base import BaseModel
from truckmate.models.enums import UserRole, AuthProvider, enum_values


class User(BaseModel):
    """
    Marketplace user keyed by the identity provider's subject identifier.

    Attributes:
        subject_id: Stable identifier issued by the identity provider
        role: driver, owner, admin or unassigned (before registration)
        registration_completed: Set once name, phone and role were supplied
    """
    __tablename__ = "users"

    subject_id: Mapped[str] = mapped_column(
        String(128),
        unique=True,
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    email: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        index=True,
    )

    phone: Mapped[str] = mapped_column(String(32), nullable=False, default="")

    photo_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role", create_type=False, values_callable=enum_values),
        nullable=False,
        default=UserRole.UNASSIGNED,
    )

    auth_provider: Mapped[AuthProvider] = mapped_column(
        Enum(AuthProvider, name="auth_provider", create_type=False, values_callable=enum_values),
        nullable=False,
        default=AuthProvider.PHONE,
    )

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    registration_completed: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )

    last_login_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    @property
    def is_driver(self) -> bool:
        return self.role == UserRole.DRIVER

    def __repr__(self) -> str:
        return f"<User(subject_id={self.subject_id!r}, role={self.role})>"
