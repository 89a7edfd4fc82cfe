"""Authentication request/response schemas."""
from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from truckmate.models import User, UserRole
from truckmate.schemas.base import BaseSchema


class IdTokenLogin(BaseSchema):
    """Sign-in with an identity provider ID token.

    Supplying the registration fields registers (or re-registers) the user;
    a bare token logs in.
    """

    id_token: str = Field(..., min_length=1)
    name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=32)
    role: Optional[Literal["driver", "owner"]] = None


class AppUserResponse(BaseSchema):
    """Marketplace user as returned to the mobile app."""

    id: str = Field(..., description="Identity provider subject identifier")
    name: str
    email: Optional[str] = None
    phone: str
    photo_url: Optional[str] = None
    role: UserRole
    is_active: bool
    is_available: bool = False
    registration_completed: bool
    created_at: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: User) -> "AppUserResponse":
        return cls(
            id=user.subject_id,
            name=user.name,
            email=user.email,
            phone=user.phone,
            photo_url=user.photo_url,
            role=user.role,
            is_active=user.is_active,
            is_available=bool(user.is_available),
            registration_completed=user.registration_completed,
            created_at=user.created_at,
        )


class AuthResponse(BaseSchema):
    success: bool = True
    message: str
    user: AppUserResponse


class CurrentUserResponse(BaseSchema):
    success: bool = True
    user: AppUserResponse


class AdminLogin(BaseSchema):
    """Admin console credentials."""

    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1)


class AdminInfo(BaseSchema):
    id: str
    username: str
    is_first_login: bool
    last_login_at: Optional[datetime] = None


class AdminToken(BaseSchema):
    """JWT token response for admins."""

    success: bool = True
    message: str = "Login successful"
    token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type (always 'bearer')")
    admin: AdminInfo


class ChangePassword(BaseSchema):
    current_password: Optional[str] = None
    new_password: str = Field(..., min_length=1)


class AdminCreate(BaseSchema):
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1)


class AdminCreated(BaseSchema):
    success: bool = True
    message: str = "New admin created successfully"
    admin: AdminInfo
