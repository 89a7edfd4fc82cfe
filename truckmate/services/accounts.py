"""
Marketplace user accounts.

Users are keyed by the identity provider's subject identifier. Anyone with
a valid ID token is known to the system: the first authenticated request
creates an ``unassigned`` user, and registration later fills in name,
phone and role.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from truckmate.core.errors import NotFoundError, PermissionDeniedError, ValidationError
from truckmate.models import AuthProvider, User, UserRole
from truckmate.repositories.base import UnitOfWork
from truckmate.services.identity import VerifiedIdentity

logger = logging.getLogger(__name__)

REGISTRABLE_ROLES = frozenset({UserRole.DRIVER, UserRole.OWNER})


def _normalize_phone(phone: Optional[str]) -> str:
    return "".join((phone or "").split())


class AccountService:
    """Registration, login and on-demand user provisioning."""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def ensure_user(
        self,
        identity: VerifiedIdentity,
        provider: AuthProvider = AuthProvider.PHONE,
    ) -> User:
        """Return the user for ``identity``, creating an unassigned one if new."""
        user = await self.uow.users.get_by_subject(identity.subject)
        if user is not None:
            return user

        user = await self.uow.users.add(User(
            subject_id=identity.subject,
            name=identity.name or "User",
            email=identity.email,
            phone=_normalize_phone(identity.phone_number),
            photo_url=identity.picture,
            role=UserRole.UNASSIGNED,
            auth_provider=provider,
            is_active=True,
            is_available=False,
            registration_completed=False,
            last_login_at=datetime.now(timezone.utc),
        ))
        await self.uow.commit()
        logger.info(f"Created unassigned user {identity.subject}")
        return user

    async def register(
        self,
        identity: VerifiedIdentity,
        *,
        name: str,
        phone: str,
        role: str,
        provider: AuthProvider,
    ) -> User:
        """Create or overwrite the user's registration details.

        Raises:
            ValidationError: Blank fields, unknown role, or a phone number
                that does not match the one the provider verified.
        """
        name = (name or "").strip()
        phone = _normalize_phone(phone)
        if not name or not phone:
            raise ValidationError(
                "Name, phone and role are required for registration",
                details=[
                    {"field": field, "message": "Field required"}
                    for field, value in (("name", name), ("phone", phone))
                    if not value
                ],
            )
        try:
            role = UserRole(role)
        except ValueError:
            role = None
        if role not in REGISTRABLE_ROLES:
            raise ValidationError(
                "Role must be 'driver' or 'owner'",
                details=[{"field": "role", "message": "Invalid role"}],
            )

        token_phone = _normalize_phone(identity.phone_number)
        if token_phone and token_phone != phone:
            raise ValidationError(
                "Phone number does not match authenticated number",
                details=[{"field": "phone", "message": "Phone mismatch"}],
            )

        values = {
            "name": name,
            "phone": phone,
            "role": role,
            "auth_provider": provider,
            "is_active": True,
            "registration_completed": True,
            "last_login_at": datetime.now(timezone.utc),
        }
        if identity.email:
            values["email"] = identity.email
        if identity.picture:
            values["photo_url"] = identity.picture

        user = await self.uow.users.get_by_subject(identity.subject)
        if user is None:
            user = await self.uow.users.add(User(subject_id=identity.subject, **values))
        else:
            user = await self.uow.users.update(user, values)
        await self.uow.commit()

        logger.info(f"User {identity.subject} registered as {role.value} via {provider.value}")
        return user

    async def login(self, identity: VerifiedIdentity) -> User:
        """Log in a registered user.

        Raises:
            NotFoundError: Unknown subject; ``details.needsRegistration`` is
                set so the app can show the registration form.
        """
        user = await self.uow.users.get_by_subject(identity.subject)
        if user is None or not user.registration_completed:
            raise NotFoundError(
                "Please complete registration first",
                details={"needsRegistration": True, "phone": identity.phone_number},
            )
        user = await self.uow.users.update(
            user, {"last_login_at": datetime.now(timezone.utc)}
        )
        await self.uow.commit()
        logger.info(f"User {identity.subject} logged in")
        return user

    async def become_driver(self, user: User) -> User:
        """Assign the driver role on first profile submission.

        Not committed here; the profile submission that follows commits or
        rolls back the role change together with the profile.

        Raises:
            PermissionDeniedError: The user already holds another role.
        """
        if user.role == UserRole.DRIVER:
            return user
        if user.role != UserRole.UNASSIGNED:
            raise PermissionDeniedError(
                "Only drivers can submit a driver profile",
                details={"role": user.role.value},
            )
        user = await self.uow.users.update(user, {"role": UserRole.DRIVER})
        logger.info(f"User {user.subject_id} assigned driver role")
        return user

    async def set_availability(self, user: User, is_available: bool) -> User:
        """Mark a driver available or unavailable for jobs.

        Raises:
            PermissionDeniedError: The user is not a driver.
        """
        if not user.is_driver:
            raise PermissionDeniedError(
                "Only drivers can change availability",
                details={"role": user.role.value},
            )
        user = await self.uow.users.update(user, {"is_available": is_available})
        await self.uow.commit()
        logger.info(f"Driver {user.subject_id} availability set to {is_available}")
        return user
