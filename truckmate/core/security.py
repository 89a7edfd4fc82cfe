"""Security utilities for admin authentication."""
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError

from truckmate.core.config import get_settings

# Password hashing context (bcrypt)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password.

    Args:
        plain_password: User input password
        hashed_password: Stored bcrypt hash

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token for an admin.

    Args:
        data: Payload data (typically {"sub": admin_id})
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string carrying ``is_admin: true``
    """
    settings = get_settings()
    to_encode = data.copy()
    to_encode.setdefault("is_admin", True)

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.access_token_expire_minutes
        )

    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> Optional[str]:
    """Decode and validate an admin JWT.

    Returns:
        Admin id (sub claim) if the token is valid and carries the admin
        flag, None otherwise
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token, settings.secret_key, algorithms=[settings.algorithm]
        )
    except (JWTError, ValidationError):
        return None

    admin_id = payload.get("sub")
    if admin_id is None or not payload.get("is_admin"):
        return None
    return admin_id
