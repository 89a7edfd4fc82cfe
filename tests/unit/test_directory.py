"""Tests for truckmate.services.directory.UserDirectory."""
from datetime import datetime, timezone

import pytest

from truckmate.models import DriverProfile, User, UserRole, VerificationStatus
from truckmate.services.directory import RECENT_USERS_LIMIT, UserDirectory


async def _user(uow, subject, role=UserRole.DRIVER, *, is_available=False, photo_url=None):
    user = await uow.users.add(User(
        subject_id=subject,
        name=f"User {subject}",
        phone="+919800000001",
        photo_url=photo_url,
        role=role,
        is_available=is_available,
        registration_completed=True,
    ))
    await uow.commit()
    return user


async def _profile(uow, subject, **values):
    profile = await uow.profiles.add(DriverProfile(
        user_id=subject,
        name=f"User {subject}",
        known_truck_types=["container"],
        profile_completed=True,
        verification_status=VerificationStatus.PENDING,
        **values,
    ))
    await uow.commit()
    return profile


@pytest.fixture
def directory(uow):
    # In-memory rows are stamped from 2026-01-01 onwards.
    return UserDirectory(uow, clock=lambda: datetime(2026, 1, 2, tzinfo=timezone.utc))


class TestDrivers:

    async def test_drivers_newest_first_with_profiles(self, directory, uow):
        await _user(uow, "driver-a")
        await _user(uow, "owner-a", UserRole.OWNER)
        await _user(uow, "driver-b")
        await _profile(uow, "driver-a", license_number="MH12-0001")

        entries = await directory.drivers()

        assert [e.user.subject_id for e in entries] == ["driver-b", "driver-a"]
        assert entries[0].profile is None
        assert entries[1].profile.license_number == "MH12-0001"

    async def test_profile_photo_preferred(self, directory, uow):
        await _user(uow, "driver-a", photo_url="http://idp/avatar.jpg")
        await _user(uow, "driver-b", photo_url="http://idp/avatar-b.jpg")
        await _profile(uow, "driver-a", profile_photo="http://test/uploads/p.jpg")

        photos = {e.user.subject_id: e.photo_url for e in await directory.drivers()}

        assert photos == {
            "driver-a": "http://test/uploads/p.jpg",
            "driver-b": "http://idp/avatar-b.jpg",
        }

    async def test_empty(self, directory):
        assert await directory.drivers() == []


class TestDashboard:

    async def test_counts(self, directory, uow):
        await _user(uow, "driver-a", is_available=True)
        await _user(uow, "driver-b")
        await _user(uow, "owner-a", UserRole.OWNER, is_available=True)
        await _user(uow, "new-user", UserRole.UNASSIGNED)

        counts = (await directory.dashboard()).counts

        assert counts.total_users == 4
        assert counts.total_drivers == 2
        assert counts.total_owners == 1
        assert counts.active_drivers == 1

    async def test_recent_users_limited(self, directory, uow):
        for i in range(RECENT_USERS_LIMIT + 2):
            await _user(uow, f"driver-{i:02d}")

        recent = (await directory.dashboard()).recent_users

        assert len(recent) == RECENT_USERS_LIMIT
        assert recent[0].user.subject_id == f"driver-{RECENT_USERS_LIMIT + 1:02d}"

    async def test_old_users_not_recent(self, uow):
        await _user(uow, "driver-a")
        directory = UserDirectory(uow, clock=lambda: datetime(2026, 1, 9, tzinfo=timezone.utc))

        dashboard = await directory.dashboard()

        assert dashboard.counts.total_users == 1
        assert dashboard.recent_users == []
