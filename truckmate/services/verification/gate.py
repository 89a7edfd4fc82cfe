"""
Job access gate.

Drivers may reach job endpoints only once an admin has approved their
profile. Other roles pass straight through.
"""
import logging
from typing import Optional

from truckmate.models import DriverProfile, User, UserRole, VerificationStatus
from truckmate.repositories.base import ProfileStore, UserStore
from truckmate.services.verification.types import AccessCode, AccessDecision

logger = logging.getLogger(__name__)

DEFAULT_REJECTED_MESSAGE = "Your profile was rejected. Please update and resubmit."


class AccessGate:
    """Read-only check of a user's verification state."""

    def __init__(self, users: UserStore, profiles: ProfileStore):
        self.users = users
        self.profiles = profiles

    async def authorize(self, user_id: str) -> AccessDecision:
        """
        Decide whether ``user_id`` may access jobs.

        Deny codes are evaluated in a fixed order, so an incomplete profile
        is never reported as rejected even if a stale rejection reason is
        still stored.
        """
        user = await self.users.get_by_subject(user_id)
        if user is not None and user.role != UserRole.DRIVER:
            return AccessDecision.allow()

        profile = await self.profiles.get_by_user_id(user_id)
        decision = self.evaluate(user, profile)
        if not decision.allowed:
            logger.info(f"Job access denied for {user_id}: {decision.code.value}")
        return decision

    @staticmethod
    def evaluate(user: Optional[User], profile: Optional[DriverProfile]) -> AccessDecision:
        if user is None and profile is None:
            return AccessDecision.deny(
                AccessCode.USER_NOT_FOUND,
                "Please complete registration first",
                redirect_to="/register",
            )
        if user is not None and user.role != UserRole.DRIVER:
            return AccessDecision.allow()
        if profile is None:
            return AccessDecision.deny(
                AccessCode.NO_PROFILE,
                "Please complete your driver profile first",
                redirect_to="/driver-profile-setup",
            )
        if not profile.profile_completed:
            return AccessDecision.deny(
                AccessCode.INCOMPLETE_PROFILE,
                "Please complete your driver profile",
                redirect_to="/driver-profile-setup",
            )

        status = profile.verification_status
        if status == VerificationStatus.PENDING:
            return AccessDecision.deny(
                AccessCode.VERIFICATION_PENDING,
                "Your profile is under review. Please wait for admin approval.",
                verification_status=status,
            )
        if status == VerificationStatus.REJECTED:
            return AccessDecision.deny(
                AccessCode.VERIFICATION_REJECTED,
                profile.rejection_reason or DEFAULT_REJECTED_MESSAGE,
                verification_status=status,
                rejection_reason=profile.rejection_reason,
            )
        if status != VerificationStatus.APPROVED:
            return AccessDecision.deny(
                AccessCode.NOT_VERIFIED,
                "Your profile needs to be verified",
                verification_status=status,
            )
        return AccessDecision.allow(status)
