"""API test fixtures -- helpers for configuring mock session returns."""
from datetime import datetime, timezone
from unittest.mock import MagicMock
from uuid import uuid4

from truckmate.core.security import get_password_hash


def make_mock_result(scalar_value=None, scalars_list=None):
    """Create a mock SQLAlchemy Result object."""
    result = MagicMock()
    result.scalar_one_or_none = MagicMock(return_value=scalar_value)

    scalars_mock = MagicMock()
    scalars_mock.all = MagicMock(return_value=scalars_list or [])
    scalars_mock.unique = MagicMock(return_value=scalars_mock)
    result.scalars = MagicMock(return_value=scalars_mock)
    result.first = MagicMock(return_value=None)
    result.rowcount = len(scalars_list) if scalars_list else (1 if scalar_value else 0)

    return result


def make_mock_admin(admin_id=None, username="reviewer", password="admin123", is_first_login=False):
    """Create a mock Admin ORM object."""
    admin = MagicMock()
    admin.id = admin_id or uuid4()
    admin.username = username
    admin.hashed_password = get_password_hash(password)
    admin.is_active = True
    admin.is_first_login = is_first_login
    admin.created_by = "seed"
    admin.last_login_at = None
    admin.created_at = datetime.now(timezone.utc)
    admin.updated_at = datetime.now(timezone.utc)
    return admin


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def profile_form(**overrides) -> dict:
    """Multipart form for a complete driver profile."""
    form = {
        "name": "Ravi Kumar",
        "licenseNumber": "MH12-2019-0001234",
        "licenseExpiryDate": "2030-06-30",
        "knownTruckTypes": ["container", "trailer"],
        "experience": "5 years",
        "gender": "male",
        "age": "34",
        "location": "Pune",
    }
    form.update(overrides)
    return form


def license_files(front: bytes = b"front-image", back: bytes = b"back-image") -> dict:
    return {
        "licensePhotoFront": ("front.jpg", front, "image/jpeg"),
        "licensePhotoBack": ("back.png", back, "image/png"),
    }
