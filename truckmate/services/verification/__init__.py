"""
Driver verification: profile submission, admin review and job access.
"""
from truckmate.services.verification.gate import AccessGate
from truckmate.services.verification.policy import (
    CRITICAL_FIELDS,
    REQUIRED_FIELDS,
    changed_critical_fields,
)
from truckmate.services.verification.types import (
    AccessCode,
    AccessDecision,
    DecisionResult,
    DriverSummary,
    ProfileSummary,
    ReviewItem,
    SubmissionResult,
    VerificationStats,
)
from truckmate.services.verification.workflow import (
    DEFAULT_REJECTION_REASON,
    SUPERSEDED_NOTE,
    ReviewListing,
    VerificationWorkflow,
)

__all__ = [
    "AccessCode",
    "AccessDecision",
    "AccessGate",
    "CRITICAL_FIELDS",
    "DEFAULT_REJECTION_REASON",
    "REQUIRED_FIELDS",
    "DecisionResult",
    "DriverSummary",
    "ProfileSummary",
    "ReviewItem",
    "ReviewListing",
    "SUPERSEDED_NOTE",
    "SubmissionResult",
    "VerificationStats",
    "VerificationWorkflow",
    "changed_critical_fields",
]
