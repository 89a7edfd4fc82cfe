"""
Admin view of the marketplace user base.

Read-only. The driver directory joins every driver with their profile; the
dashboard summarizes user counts and lists recent sign-ups.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Optional

from truckmate.models import DriverProfile, User, UserRole
from truckmate.repositories.base import UnitOfWork
from truckmate.services.verification.workflow import utcnow

RECENT_USERS_WINDOW = timedelta(days=7)
RECENT_USERS_LIMIT = 10


@dataclass
class DirectoryEntry:
    """A user joined with their driver profile, if they have one."""
    user: User
    profile: Optional[DriverProfile] = None

    @property
    def photo_url(self) -> Optional[str]:
        if self.profile is not None and self.profile.profile_photo:
            return self.profile.profile_photo
        return self.user.photo_url


@dataclass
class UserCounts:
    total_users: int
    total_drivers: int
    total_owners: int
    active_drivers: int


@dataclass
class Dashboard:
    counts: UserCounts
    recent_users: list[DirectoryEntry] = field(default_factory=list)


class UserDirectory:
    """Driver listing and dashboard figures for the admin console."""

    def __init__(self, uow: UnitOfWork, *, clock: Callable[[], datetime] = utcnow):
        self.uow = uow
        self.clock = clock

    async def drivers(self) -> list[DirectoryEntry]:
        """All drivers, newest first, with their profiles."""
        users = await self.uow.users.list_users(role=UserRole.DRIVER)
        return await self._with_profiles(users)

    async def dashboard(self) -> Dashboard:
        by_role = await self.uow.users.count_by_role()
        counts = UserCounts(
            total_users=sum(by_role.values()),
            total_drivers=by_role[UserRole.DRIVER],
            total_owners=by_role[UserRole.OWNER],
            active_drivers=await self.uow.users.count_available_drivers(),
        )
        recent = await self.uow.users.list_users(
            created_since=self.clock() - RECENT_USERS_WINDOW,
            limit=RECENT_USERS_LIMIT,
        )
        return Dashboard(counts, await self._with_profiles(recent))

    async def _with_profiles(self, users: list[User]) -> list[DirectoryEntry]:
        profiles = await self.uow.profiles.get_many([user.subject_id for user in users])
        return [DirectoryEntry(user, profiles.get(user.subject_id)) for user in users]
