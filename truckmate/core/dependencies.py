"""FastAPI dependencies for authentication, authorization and services."""
import logging
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from truckmate.core.errors import AuthenticationError, PermissionDeniedError
from truckmate.core.locks import KeyedLock
from truckmate.core.security import decode_access_token
from truckmate.db.database import get_async_session
from truckmate.models import Admin, User
from truckmate.repositories import SqlUnitOfWork, UnitOfWork
from truckmate.services.accounts import AccountService
from truckmate.services.directory import UserDirectory
from truckmate.services.identity import (
    IdentityVerifier,
    VerifiedIdentity,
    build_identity_verifier,
)
from truckmate.services.storage import BlobStorage, build_storage
from truckmate.services.verification import AccessGate, VerificationWorkflow

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor (reads Authorization: Bearer <token>)
security = HTTPBearer(auto_error=False)


# =============================================================================
# Services
# =============================================================================

async def get_uow(
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> UnitOfWork:
    return SqlUnitOfWork(session)


def get_driver_locks(request: Request) -> KeyedLock:
    """Process-wide per-driver lock registry."""
    locks = getattr(request.app.state, "driver_locks", None)
    if locks is None:
        locks = request.app.state.driver_locks = KeyedLock()
    return locks


def get_identity_verifier(request: Request) -> IdentityVerifier:
    verifier = getattr(request.app.state, "identity_verifier", None)
    if verifier is None:
        verifier = request.app.state.identity_verifier = build_identity_verifier()
    return verifier


def get_storage(request: Request) -> BlobStorage:
    storage = getattr(request.app.state, "storage", None)
    if storage is None:
        storage = request.app.state.storage = build_storage()
    return storage


async def get_workflow(
    uow: Annotated[UnitOfWork, Depends(get_uow)],
    locks: Annotated[KeyedLock, Depends(get_driver_locks)],
) -> VerificationWorkflow:
    return VerificationWorkflow(uow, locks)


async def get_gate(uow: Annotated[UnitOfWork, Depends(get_uow)]) -> AccessGate:
    return AccessGate(uow.users, uow.profiles)


async def get_accounts(uow: Annotated[UnitOfWork, Depends(get_uow)]) -> AccountService:
    return AccountService(uow)


async def get_directory(uow: Annotated[UnitOfWork, Depends(get_uow)]) -> UserDirectory:
    return UserDirectory(uow)


# =============================================================================
# App users (identity provider tokens)
# =============================================================================

async def get_current_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    verifier: Annotated[IdentityVerifier, Depends(get_identity_verifier)],
) -> VerifiedIdentity:
    """Verify the Bearer ID token.

    Raises:
        AuthenticationError: Token missing, invalid or expired.
    """
    if credentials is None:
        raise AuthenticationError("No token provided")
    return await verifier.verify(credentials.credentials)


async def get_current_user(
    identity: Annotated[VerifiedIdentity, Depends(get_current_identity)],
    accounts: Annotated[AccountService, Depends(get_accounts)],
) -> User:
    """Dependency to get the signed-in marketplace user.

    Users seen for the first time are created with the ``unassigned`` role.

    Raises:
        PermissionDeniedError: The account has been deactivated.
    """
    user = await accounts.ensure_user(identity)
    if not user.is_active:
        raise PermissionDeniedError("User account is disabled")
    return user


async def require_job_access(
    user: Annotated[User, Depends(get_current_user)],
    gate: Annotated[AccessGate, Depends(get_gate)],
) -> User:
    """Guard for job endpoints: drivers must be verified.

    Usage:
        @router.get("/jobs")
        async def list_jobs(
            user: Annotated[User, Depends(require_job_access)]
        ):
            ...

    Raises:
        PermissionDeniedError: Carrying the gate's deny code.
    """
    decision = await gate.authorize(user.subject_id)
    if not decision.allowed:
        details = {}
        if decision.verification_status is not None:
            details["verificationStatus"] = decision.verification_status.value
        if decision.rejection_reason:
            details["rejectionReason"] = decision.rejection_reason
        if decision.redirect_to:
            details["redirectTo"] = decision.redirect_to
        raise PermissionDeniedError(
            decision.message,
            code=decision.code.value,
            details=details or None,
        )
    return user


# =============================================================================
# Admins (console JWTs)
# =============================================================================

async def get_current_admin(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> Admin:
    """Dependency to get current authenticated admin from JWT token.

    Usage:
        @router.get("/protected")
        async def protected_route(
            admin: Annotated[Admin, Depends(get_current_admin)]
        ):
            return {"message": f"Hello {admin.username}"}

    Raises:
        AuthenticationError: If token is missing, invalid, or admin not found
    """
    if credentials is None:
        raise AuthenticationError("Admin authentication required")

    admin_id = decode_access_token(credentials.credentials)
    try:
        admin_uuid = UUID(admin_id) if admin_id else None
    except ValueError:
        admin_uuid = None
    if admin_uuid is None:
        raise AuthenticationError("Could not validate credentials")

    result = await session.execute(
        select(Admin).where(Admin.id == admin_uuid, Admin.is_active == True)
    )
    admin = result.scalar_one_or_none()

    if admin is None:
        logger.warning(f"Admin token for unknown or inactive admin {admin_id}")
        raise AuthenticationError("Could not validate credentials")

    return admin
