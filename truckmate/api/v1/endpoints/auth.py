"""Authentication endpoints for app users and admins."""
import logging
from datetime import datetime, timedelta, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from truckmate.core.config import get_settings
from truckmate.core.dependencies import (
    get_accounts,
    get_current_admin,
    get_current_user,
    get_identity_verifier,
)
from truckmate.core.errors import AuthenticationError, ConflictError, ValidationError
from truckmate.core.security import create_access_token, get_password_hash, verify_password
from truckmate.db.database import get_async_session
from truckmate.models import Admin, AuthProvider, User
from truckmate.schemas.auth import (
    AdminCreate,
    AdminCreated,
    AdminInfo,
    AdminLogin,
    AdminToken,
    AppUserResponse,
    AuthResponse,
    ChangePassword,
    CurrentUserResponse,
    IdTokenLogin,
)
from truckmate.schemas.base import MessageResponse
from truckmate.services.accounts import AccountService
from truckmate.services.identity import IdentityVerifier

router = APIRouter(prefix="/auth", tags=["Authentication"])
admin_router = APIRouter(prefix="/admin", tags=["Admin Accounts"])
logger = logging.getLogger(__name__)


def _admin_info(admin: Admin) -> AdminInfo:
    return AdminInfo(
        id=str(admin.id),
        username=admin.username,
        is_first_login=bool(admin.is_first_login),
        last_login_at=admin.last_login_at,
    )


# =============================================================================
# App users
# =============================================================================

@router.post("/phone", response_model=AuthResponse)
async def phone_login(
    body: IdTokenLogin,
    verifier: Annotated[IdentityVerifier, Depends(get_identity_verifier)],
    accounts: Annotated[AccountService, Depends(get_accounts)],
) -> AuthResponse:
    """Phone sign-in.

    With ``name``, ``phone`` and ``role`` the user is registered (the phone
    must match the number the identity provider verified); otherwise this
    is a login and unknown users get 404 with ``needsRegistration``.
    """
    identity = await verifier.verify(body.id_token)

    if body.name and body.phone and body.role:
        user = await accounts.register(
            identity,
            name=body.name,
            phone=body.phone,
            role=body.role,
            provider=AuthProvider.PHONE,
        )
        return AuthResponse(message="Registration successful", user=AppUserResponse.from_user(user))

    user = await accounts.login(identity)
    return AuthResponse(message="Login successful", user=AppUserResponse.from_user(user))


@router.post("/google", response_model=AuthResponse)
async def google_login(
    body: IdTokenLogin,
    verifier: Annotated[IdentityVerifier, Depends(get_identity_verifier)],
    accounts: Annotated[AccountService, Depends(get_accounts)],
) -> AuthResponse:
    """Google sign-in. Registration needs ``phone`` and ``role``."""
    identity = await verifier.verify(body.id_token)

    if body.phone and body.role:
        name = body.name or identity.name
        if not name:
            raise ValidationError(
                "Name is required for registration",
                details=[{"field": "name", "message": "Field required"}],
            )
        user = await accounts.register(
            identity,
            name=name,
            phone=body.phone,
            role=body.role,
            provider=AuthProvider.GOOGLE,
        )
        return AuthResponse(message="Registration successful", user=AppUserResponse.from_user(user))

    user = await accounts.login(identity)
    return AuthResponse(message="Login successful", user=AppUserResponse.from_user(user))


@router.get("/me", response_model=CurrentUserResponse)
async def get_me(
    user: Annotated[User, Depends(get_current_user)],
) -> CurrentUserResponse:
    """The signed-in user. First-time callers get a fresh unassigned account."""
    return CurrentUserResponse(user=AppUserResponse.from_user(user))


# =============================================================================
# Admins
# =============================================================================

@admin_router.post("/login", response_model=AdminToken)
async def admin_login(
    body: AdminLogin,
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> AdminToken:
    """Login endpoint - validates credentials and returns JWT token.

    Request:
        - username: Admin's username
        - password: Admin's password

    Response:
        - token: JWT token (valid for 8 hours)
        - admin: id, username, isFirstLogin, lastLoginAt

    Raises:
        401 Unauthorized: If credentials are invalid or the account is disabled
    """
    result = await session.execute(
        select(Admin).where(Admin.username == body.username, Admin.is_active == True)
    )
    admin = result.scalar_one_or_none()

    if admin is None:
        logger.warning(f"Admin login failed: '{body.username}' not found or inactive")
        raise AuthenticationError("Invalid credentials")

    if not verify_password(body.password, admin.hashed_password):
        logger.warning(f"Admin login failed: invalid password for '{body.username}'")
        raise AuthenticationError("Invalid credentials")

    admin.last_login_at = datetime.now(timezone.utc)
    await session.commit()

    settings = get_settings()
    access_token = create_access_token(
        data={"sub": str(admin.id)},
        expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
    )

    logger.info(f"Admin '{admin.username}' logged in successfully")
    return AdminToken(token=access_token, admin=_admin_info(admin))


@admin_router.post("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePassword,
    admin: Annotated[Admin, Depends(get_current_admin)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> MessageResponse:
    """Change the signed-in admin's password.

    The current password is required except on first login, when the
    seeded password is being replaced.
    """
    settings = get_settings()
    if len(body.new_password) < settings.min_admin_password_length:
        raise ValidationError(
            f"New password must be at least {settings.min_admin_password_length} characters long",
            details=[{"field": "newPassword", "message": "Too short"}],
        )

    if not admin.is_first_login:
        if not body.current_password or not verify_password(
            body.current_password, admin.hashed_password
        ):
            logger.warning(f"Password change rejected for '{admin.username}': wrong current password")
            raise AuthenticationError("Current password is incorrect")

    admin.hashed_password = get_password_hash(body.new_password)
    admin.is_first_login = False
    await session.commit()

    logger.info(f"Admin '{admin.username}' changed password")
    return MessageResponse(message="Password changed successfully")


@admin_router.post("/admins", response_model=AdminCreated, status_code=status.HTTP_201_CREATED)
async def create_admin(
    body: AdminCreate,
    admin: Annotated[Admin, Depends(get_current_admin)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> AdminCreated:
    """Create another admin account. The new admin must change the password on first login."""
    settings = get_settings()
    if len(body.password) < settings.min_admin_password_length:
        raise ValidationError(
            f"Password must be at least {settings.min_admin_password_length} characters long",
            details=[{"field": "password", "message": "Too short"}],
        )

    result = await session.execute(select(Admin).where(Admin.username == body.username))
    if result.scalar_one_or_none() is not None:
        raise ConflictError("Username already exists", details={"field": "username"})

    new_admin = Admin(
        username=body.username,
        hashed_password=get_password_hash(body.password),
        is_active=True,
        is_first_login=True,
        created_by=str(admin.id),
    )
    session.add(new_admin)
    await session.commit()
    await session.refresh(new_admin)

    logger.info(f"Admin '{admin.username}' created admin '{new_admin.username}'")
    return AdminCreated(admin=_admin_info(new_admin))
