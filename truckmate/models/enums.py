"""
Enum type definitions for TruckMate.

These enums map directly to PostgreSQL ENUM types created by the baseline
migration. Values are stored lowercase, as clients see them.
"""
from enum import Enum


class UserRole(str, Enum):
    """Marketplace role chosen at registration."""
    DRIVER = "driver"
    OWNER = "owner"
    ADMIN = "admin"
    UNASSIGNED = "unassigned"


class AuthProvider(str, Enum):
    """How the user signed in with the identity provider."""
    PHONE = "phone"
    GOOGLE = "google"


class VerificationStatus(str, Enum):
    """
    Driver profile verification state.

    (none) -> PENDING -> APPROVED | REJECTED
    REJECTED -> PENDING on resubmission or a critical edit
    APPROVED -> PENDING on a critical edit
    """
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RequestStatus(str, Enum):
    """Verification request state. Only PENDING requests can be decided."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class RequestPriority(str, Enum):
    """Informational review priority."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ReviewAction(str, Enum):
    """Admin decision on a pending request."""
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def verification_status(self) -> VerificationStatus:
        return VerificationStatus(self.value)

    @property
    def request_status(self) -> RequestStatus:
        return RequestStatus(self.value)


def enum_values(enum_cls: type[Enum]) -> list[str]:
    """values_callable for SQLAlchemy Enum columns (store .value, not .name)."""
    return [member.value for member in enum_cls]
