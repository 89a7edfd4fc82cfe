"""
SQLAlchemy ORM Models for TruckMate.

This module exports all domain models and enums.
"""

# Enums
from truckmate.models.enums import (
    UserRole,
    AuthProvider,
    VerificationStatus,
    RequestStatus,
    RequestPriority,
    ReviewAction,
)

# Base
from truckmate.models.base import BaseModel, TimestampMixin, UUIDPrimaryKeyMixin

# Domain Models
from truckmate.models.user import User
from truckmate.models.admin import Admin
from truckmate.models.driver_profile import DriverProfile
from truckmate.models.verification_request import VerificationRequest

__all__ = [
    # Enums
    "UserRole",
    "AuthProvider",
    "VerificationStatus",
    "RequestStatus",
    "RequestPriority",
    "ReviewAction",
    # Base
    "BaseModel",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    # Domain Models
    "User",
    "Admin",
    "DriverProfile",
    "VerificationRequest",
]
