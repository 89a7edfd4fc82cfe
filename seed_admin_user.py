"""Seed script to create the first admin account.

Run this after database migrations:
    alembic upgrade head
    ADMIN_USERNAME=admin ADMIN_PASSWORD=... python seed_admin_user.py

The seeded admin must change the password on first login.
"""
import asyncio
import os
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from truckmate.core.security import get_password_hash
from truckmate.db.database import async_session_maker
from truckmate.models import Admin


async def create_admin_if_missing(
    session: AsyncSession, username: str, password: str
) -> tuple[Admin, bool]:
    """Return the admin named ``username`` and whether it was just created."""
    result = await session.execute(select(Admin).where(Admin.username == username))
    existing: Optional[Admin] = result.scalar_one_or_none()
    if existing is not None:
        return existing, False

    admin = Admin(
        username=username,
        hashed_password=get_password_hash(password),
        is_active=True,
        is_first_login=True,
        created_by="seed",
    )
    session.add(admin)
    await session.commit()
    await session.refresh(admin)
    return admin, True


async def seed_admin_user():
    """Create default admin account if not exists."""
    username = os.environ.get("ADMIN_USERNAME", "admin")
    password = os.environ.get("ADMIN_PASSWORD", "admin123")  # Change this in production!

    async with async_session_maker() as session:
        admin, created = await create_admin_if_missing(session, username, password)

    if not created:
        print(f"[X] Admin '{username}' already exists. Skipping.")
        print(f"    Admin ID: {admin.id}")
        return

    print(f"[OK] Admin account created successfully!")
    print(f"     Username: {username}")
    print(f"     Admin ID: {admin.id}")
    print(f"\n[!] IMPORTANT: Change the password on first login!")


if __name__ == "__main__":
    asyncio.run(seed_admin_user())
