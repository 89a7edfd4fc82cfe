"""
Identity verification for marketplace users.

Drivers and owners sign in with an external identity provider (Firebase
phone or Google auth) and send the resulting ID token as a Bearer
credential. A verifier turns that opaque token into a stable subject
identifier plus whatever profile claims the provider includes.
"""
import asyncio
import logging
import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

import httpx
from jose import ExpiredSignatureError, JWTError, jwt

from truckmate.core.config import Settings, get_settings
from truckmate.core.errors import AuthenticationError, DependencyError, TokenExpiredError

logger = logging.getLogger(__name__)

_MAX_AGE_RE = re.compile(r"max-age=(\d+)")


@dataclass(frozen=True)
class VerifiedIdentity:
    """Claims extracted from a verified ID token."""
    subject: str
    phone_number: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None
    picture: Optional[str] = None

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> "VerifiedIdentity":
        return cls(
            subject=claims.get("user_id") or claims["sub"],
            phone_number=claims.get("phone_number"),
            email=claims.get("email"),
            name=claims.get("name"),
            picture=claims.get("picture"),
        )


class IdentityVerifier(ABC):
    """Verifies ID tokens issued by an external identity provider."""

    def __init__(self, min_subject_length: int = 10):
        self.min_subject_length = min_subject_length

    async def verify(self, credential: str) -> VerifiedIdentity:
        """Verify ``credential`` and return its identity.

        Raises:
            TokenExpiredError: The token is well formed but expired.
            AuthenticationError: Anything else wrong with the token.
        """
        if not credential:
            raise AuthenticationError("No token provided")

        try:
            claims = await self._decode(credential)
        except ExpiredSignatureError:
            raise TokenExpiredError("Token expired")
        except JWTError as e:
            logger.warning(f"ID token rejected: {e}")
            raise AuthenticationError("Invalid token")

        subject = claims.get("user_id") or claims.get("sub")
        if not isinstance(subject, str) or len(subject) < self.min_subject_length:
            raise AuthenticationError("Invalid user identifier in token")
        return VerifiedIdentity.from_claims(claims)

    @abstractmethod
    async def _decode(self, credential: str) -> dict[str, Any]:
        """Check signature and registered claims, returning the payload.

        Implementations raise ``jose.JWTError`` (or a subclass) on failure.
        """


class JWTIdentityVerifier(IdentityVerifier):
    """Shared-secret tokens, for local development and tests."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        *,
        issuer: Optional[str] = None,
        audience: Optional[str] = None,
        min_subject_length: int = 10,
    ):
        super().__init__(min_subject_length)
        self.secret = secret
        self.algorithm = algorithm
        self.issuer = issuer
        self.audience = audience

    async def _decode(self, credential: str) -> dict[str, Any]:
        return jwt.decode(
            credential,
            self.secret,
            algorithms=[self.algorithm],
            issuer=self.issuer,
            audience=self.audience,
            options={"verify_aud": self.audience is not None},
        )

    def issue(self, subject: str, **claims: Any) -> str:
        """Mint a token this verifier accepts."""
        payload = {"sub": subject, **claims}
        if self.issuer:
            payload.setdefault("iss", self.issuer)
        if self.audience:
            payload.setdefault("aud", self.audience)
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)


class FirebaseIdentityVerifier(IdentityVerifier):
    """
    Firebase Auth ID tokens.

    Tokens are RS256-signed by Google. Signing certificates are published
    at ``cert_url`` keyed by ``kid`` and cached for as long as the
    response's ``Cache-Control: max-age`` allows.

    Firebase Documentation:
    https://firebase.google.com/docs/auth/admin/verify-id-tokens
    """

    ISSUER_PREFIX = "https://securetoken.google.com/"

    def __init__(
        self,
        project_id: str,
        cert_url: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
        min_subject_length: int = 10,
    ):
        super().__init__(min_subject_length)
        self.project_id = project_id
        self.cert_url = cert_url
        self._client = client
        self._certs: dict[str, str] = {}
        self._certs_expire_at: float = 0
        self._refresh_lock = asyncio.Lock()

    async def _decode(self, credential: str) -> dict[str, Any]:
        header = jwt.get_unverified_header(credential)
        if header.get("alg") != "RS256":
            raise JWTError("Unexpected signing algorithm")

        kid = header.get("kid")
        certs = await self._get_certs()
        if kid not in certs:
            # Google rotates keys; refetch once before giving up.
            certs = await self._get_certs(force=True)
        cert = certs.get(kid)
        if cert is None:
            raise JWTError("Unknown signing key")

        return jwt.decode(
            credential,
            cert,
            algorithms=["RS256"],
            audience=self.project_id,
            issuer=f"{self.ISSUER_PREFIX}{self.project_id}",
            options={"verify_at_hash": False},
        )

    async def _get_certs(self, force: bool = False) -> dict[str, str]:
        async with self._refresh_lock:
            if not force and self._certs and time.monotonic() < self._certs_expire_at:
                return self._certs

            try:
                if self._client is not None:
                    response = await self._client.get(self.cert_url)
                else:
                    async with httpx.AsyncClient(timeout=10.0) as client:
                        response = await client.get(self.cert_url)
                response.raise_for_status()
            except httpx.HTTPError as e:
                logger.error(f"Failed to fetch identity provider certificates: {e}")
                raise DependencyError("Identity provider unavailable")

            self._certs = response.json()
            match = _MAX_AGE_RE.search(response.headers.get("cache-control", ""))
            max_age = int(match.group(1)) if match else 0
            self._certs_expire_at = time.monotonic() + max_age
            logger.info(f"Loaded {len(self._certs)} identity provider certificates (max-age {max_age}s)")
            return self._certs


def build_identity_verifier(settings: Optional[Settings] = None) -> IdentityVerifier:
    """Create the verifier selected by ``settings.identity_provider``."""
    settings = settings or get_settings()
    if settings.identity_provider == "firebase":
        if not settings.firebase_project_id:
            raise RuntimeError("FIREBASE_PROJECT_ID must be set when IDENTITY_PROVIDER=firebase")
        return FirebaseIdentityVerifier(
            settings.firebase_project_id,
            settings.firebase_cert_url,
            min_subject_length=settings.min_subject_length,
        )
    return JWTIdentityVerifier(
        settings.identity_jwt_secret,
        settings.identity_jwt_algorithm,
        issuer=settings.identity_jwt_issuer,
        audience=settings.identity_jwt_audience,
        min_subject_length=settings.min_subject_length,
    )
