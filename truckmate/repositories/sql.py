"""
SQLAlchemy implementations of the persistence interfaces.

All stores of one ``SqlUnitOfWork`` share a single ``AsyncSession``; writes
are flushed immediately (so constraint violations surface inside the
workflow) and made durable by ``commit``.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Collection, Mapping, Optional
from uuid import UUID

from sqlalchemy import func, select, tuple_
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from truckmate.core.errors import ConflictError, DependencyError
from truckmate.models import DriverProfile, RequestStatus, User, UserRole, VerificationRequest
from truckmate.repositories.base import (
    ProfileStore,
    UnitOfWork,
    UserStore,
    VerificationRequestStore,
)

logger = logging.getLogger(__name__)

# serialization_failure, deadlock_detected
_RETRYABLE_SQLSTATES = {"40001", "40P01"}

SCAN_PAGE_SIZE = 100


def _sqlstate(exc: DBAPIError) -> Optional[str]:
    orig = exc.orig
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


@asynccontextmanager
async def translate_errors(operation: str) -> AsyncIterator[None]:
    """Map driver/ORM failures onto the domain error taxonomy."""
    try:
        yield
    except IntegrityError as exc:
        logger.warning(f"Constraint violation during {operation}: {exc.orig}")
        raise ConflictError(
            "The record was modified concurrently, please retry",
            details={"operation": operation},
        ) from exc
    except DBAPIError as exc:
        if _sqlstate(exc) in _RETRYABLE_SQLSTATES:
            logger.warning(f"Serialization failure during {operation}: {exc.orig}")
            raise ConflictError(
                "The record was modified concurrently, please retry",
                details={"operation": operation},
            ) from exc
        logger.error(f"Data store failure during {operation}: {exc!r}")
        raise DependencyError(
            "Data store unavailable",
            details={"operation": operation, "reason": type(exc).__name__},
        ) from exc
    except (SQLAlchemyError, OSError) as exc:
        logger.error(f"Data store failure during {operation}: {exc!r}")
        raise DependencyError(
            "Data store unavailable",
            details={"operation": operation, "reason": type(exc).__name__},
        ) from exc


class _SqlStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _insert(self, obj: Any, operation: str) -> Any:
        async with translate_errors(operation):
            self.session.add(obj)
            await self.session.flush()
            await self.session.refresh(obj)
        return obj

    async def _update(self, obj: Any, changes: Mapping[str, Any], operation: str) -> Any:
        for field, value in changes.items():
            setattr(obj, field, value)
        async with translate_errors(operation):
            await self.session.flush()
            # updated_at is server generated and expires on flush
            await self.session.refresh(obj)
        return obj

    async def _one_or_none(self, query: Any, operation: str) -> Any:
        async with translate_errors(operation):
            result = await self.session.execute(query)
        return result.scalar_one_or_none()


class SqlProfileStore(_SqlStore, ProfileStore):

    async def get_by_user_id(
        self, user_id: str, *, for_update: bool = False
    ) -> Optional[DriverProfile]:
        query = select(DriverProfile).where(DriverProfile.user_id == user_id)
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)
        return await self._one_or_none(query, "profile lookup")

    async def get(self, profile_id: UUID) -> Optional[DriverProfile]:
        return await self._one_or_none(
            select(DriverProfile).where(DriverProfile.id == profile_id),
            "profile lookup",
        )

    async def get_many(self, user_ids: Collection[str]) -> dict[str, DriverProfile]:
        if not user_ids:
            return {}
        async with translate_errors("profile lookup"):
            result = await self.session.execute(
                select(DriverProfile).where(DriverProfile.user_id.in_(list(user_ids)))
            )
        return {profile.user_id: profile for profile in result.scalars().all()}

    async def add(self, profile: DriverProfile) -> DriverProfile:
        return await self._insert(profile, "profile insert")

    async def update(
        self, profile: DriverProfile, changes: Mapping[str, Any]
    ) -> DriverProfile:
        return await self._update(profile, changes, "profile update")


class SqlVerificationRequestStore(_SqlStore, VerificationRequestStore):

    async def get(
        self, request_id: UUID, *, for_update: bool = False
    ) -> Optional[VerificationRequest]:
        query = select(VerificationRequest).where(VerificationRequest.id == request_id)
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)
        return await self._one_or_none(query, "request lookup")

    async def get_pending_for_driver(
        self, driver_id: str, *, for_update: bool = False
    ) -> Optional[VerificationRequest]:
        query = select(VerificationRequest).where(
            VerificationRequest.driver_id == driver_id,
            VerificationRequest.status == RequestStatus.PENDING,
        )
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)
        return await self._one_or_none(query, "pending request lookup")

    async def latest_for_driver(self, driver_id: str) -> Optional[VerificationRequest]:
        return await self._one_or_none(
            select(VerificationRequest)
            .where(VerificationRequest.driver_id == driver_id)
            .order_by(VerificationRequest.created_at.desc(), VerificationRequest.id.desc())
            .limit(1),
            "latest request lookup",
        )

    async def add(self, request: VerificationRequest) -> VerificationRequest:
        return await self._insert(request, "request insert")

    async def update(
        self, request: VerificationRequest, changes: Mapping[str, Any]
    ) -> VerificationRequest:
        return await self._update(request, changes, "request update")

    async def scan(
        self, status: Optional[RequestStatus] = None
    ) -> AsyncIterator[VerificationRequest]:
        # Keyset pagination keeps the connection free between pages, so
        # callers may run other queries on the session while iterating.
        base = select(VerificationRequest).order_by(
            VerificationRequest.created_at.desc(),
            VerificationRequest.id.desc(),
        )
        if status is not None:
            base = base.where(VerificationRequest.status == status)

        last: Optional[VerificationRequest] = None
        while True:
            query = base.limit(SCAN_PAGE_SIZE)
            if last is not None:
                query = query.where(
                    tuple_(VerificationRequest.created_at, VerificationRequest.id)
                    < tuple_(last.created_at, last.id)
                )
            async with translate_errors("request scan"):
                result = await self.session.execute(query)
            page = result.scalars().all()
            for request in page:
                yield request
            if len(page) < SCAN_PAGE_SIZE:
                return
            last = page[-1]

    async def count_by_status(self) -> dict[RequestStatus, int]:
        async with translate_errors("request count"):
            result = await self.session.execute(
                select(VerificationRequest.status, func.count(VerificationRequest.id))
                .group_by(VerificationRequest.status)
            )
        counts = {status: 0 for status in RequestStatus}
        for status, count in result.all():
            counts[RequestStatus(status)] = count
        return counts


class SqlUserStore(_SqlStore, UserStore):

    async def get_by_subject(self, subject_id: str) -> Optional[User]:
        return await self._one_or_none(
            select(User).where(User.subject_id == subject_id),
            "user lookup",
        )

    async def add(self, user: User) -> User:
        return await self._insert(user, "user insert")

    async def update(self, user: User, changes: Mapping[str, Any]) -> User:
        return await self._update(user, changes, "user update")

    async def list_users(
        self,
        *,
        role: Optional[UserRole] = None,
        created_since: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[User]:
        query = select(User).order_by(User.created_at.desc(), User.id.desc())
        if role is not None:
            query = query.where(User.role == role)
        if created_since is not None:
            query = query.where(User.created_at >= created_since)
        if limit is not None:
            query = query.limit(limit)
        async with translate_errors("user list"):
            result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_by_role(self) -> dict[UserRole, int]:
        async with translate_errors("user count"):
            result = await self.session.execute(
                select(User.role, func.count(User.id)).group_by(User.role)
            )
        counts = {role: 0 for role in UserRole}
        for role, count in result.all():
            counts[UserRole(role)] = count
        return counts

    async def count_available_drivers(self) -> int:
        async with translate_errors("user count"):
            result = await self.session.execute(
                select(func.count(User.id)).where(
                    User.role == UserRole.DRIVER,
                    User.is_available.is_(True),
                )
            )
        return result.scalar_one()


class SqlUnitOfWork(UnitOfWork):
    """Stores bound to one request-scoped ``AsyncSession``."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.profiles = SqlProfileStore(session)
        self.requests = SqlVerificationRequestStore(session)
        self.users = SqlUserStore(session)

    async def commit(self) -> None:
        async with translate_errors("commit"):
            await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
