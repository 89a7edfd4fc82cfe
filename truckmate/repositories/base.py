"""
Persistence interfaces for the verification workflow and user directory.

The services and the access gate only talk to these abstractions. The
production implementations live in ``truckmate.repositories.sql``; tests
use in-memory doubles.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, AsyncIterator, Collection, Mapping, Optional
from uuid import UUID

from truckmate.models import DriverProfile, RequestStatus, User, UserRole, VerificationRequest


class ProfileStore(ABC):
    """Driver profile documents, unique per ``user_id``."""

    @abstractmethod
    async def get_by_user_id(
        self, user_id: str, *, for_update: bool = False
    ) -> Optional[DriverProfile]:
        """Point lookup by subject identifier.

        ``for_update`` locks the row until the surrounding transaction ends.
        """

    @abstractmethod
    async def get(self, profile_id: UUID) -> Optional[DriverProfile]:
        """Point lookup by primary key."""

    @abstractmethod
    async def get_many(self, user_ids: Collection[str]) -> dict[str, DriverProfile]:
        """Profiles for the given subjects keyed by ``user_id``; absent ones are skipped."""

    @abstractmethod
    async def add(self, profile: DriverProfile) -> DriverProfile:
        """Insert a new profile.

        Raises:
            ConflictError: A profile for the same ``user_id`` exists.
        """

    @abstractmethod
    async def update(
        self, profile: DriverProfile, changes: Mapping[str, Any]
    ) -> DriverProfile:
        """Apply a partial update and return the stored profile."""


class VerificationRequestStore(ABC):
    """Verification requests, one per review cycle."""

    @abstractmethod
    async def get(
        self, request_id: UUID, *, for_update: bool = False
    ) -> Optional[VerificationRequest]:
        """Point lookup by primary key."""

    @abstractmethod
    async def get_pending_for_driver(
        self, driver_id: str, *, for_update: bool = False
    ) -> Optional[VerificationRequest]:
        """Return the driver's open request, if any."""

    @abstractmethod
    async def latest_for_driver(self, driver_id: str) -> Optional[VerificationRequest]:
        """Most recently created request for the driver, any status."""

    @abstractmethod
    async def add(self, request: VerificationRequest) -> VerificationRequest:
        """Insert a new request.

        Raises:
            ConflictError: Another pending request exists for the driver.
        """

    @abstractmethod
    async def update(
        self, request: VerificationRequest, changes: Mapping[str, Any]
    ) -> VerificationRequest:
        """Apply a partial update and return the stored request."""

    @abstractmethod
    def scan(self, status: Optional[RequestStatus] = None) -> AsyncIterator[VerificationRequest]:
        """Iterate requests newest first, optionally filtered by status.

        Each call starts a fresh scan.
        """

    @abstractmethod
    async def count_by_status(self) -> dict[RequestStatus, int]:
        """Number of requests per status (statuses with no rows map to 0)."""


class UserStore(ABC):
    """Marketplace users keyed by identity-provider subject."""

    @abstractmethod
    async def get_by_subject(self, subject_id: str) -> Optional[User]:
        """Point lookup by subject identifier."""

    @abstractmethod
    async def add(self, user: User) -> User:
        """Insert a new user."""

    @abstractmethod
    async def update(self, user: User, changes: Mapping[str, Any]) -> User:
        """Apply a partial update and return the stored user."""

    @abstractmethod
    async def list_users(
        self,
        *,
        role: Optional[UserRole] = None,
        created_since: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[User]:
        """Users newest first, optionally filtered by role and creation time."""

    @abstractmethod
    async def count_by_role(self) -> dict[UserRole, int]:
        """Number of users per role (roles with no rows map to 0)."""

    @abstractmethod
    async def count_available_drivers(self) -> int:
        """Drivers currently marked available for jobs."""


class UnitOfWork(ABC):
    """Stores that share one transaction.

    Everything written through ``profiles``, ``requests`` and ``users``
    becomes visible to other transactions on ``commit`` and is discarded on
    ``rollback``.
    """

    profiles: ProfileStore
    requests: VerificationRequestStore
    users: UserStore

    @abstractmethod
    async def commit(self) -> None:
        """Make all pending writes durable."""

    @abstractmethod
    async def rollback(self) -> None:
        """Discard all pending writes."""
