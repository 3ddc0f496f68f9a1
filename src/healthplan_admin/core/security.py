# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Security utilities for JWT and password hashing."""

import uuid
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
from attrs import field, frozen
from beartype import beartype

from .config import Settings, get_settings


@frozen
class TokenPayload:
    """Immutable JWT token payload."""

    sub: str = field()  # Subject (admin user ID)
    exp: datetime = field()
    iat: datetime = field()
    jti: str = field()
    user_type: str = field()
    insurance_company_id: str | None = field(default=None)
    corporate_client_id: str | None = field(default=None)


@frozen
class IssuedToken:
    """Encoded access token with its lifetime."""

    access_token: str = field()
    expires_in: int = field()  # Seconds until expiration


class Security:
    """Password hashing and token issuing."""

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize security utilities."""
        settings = settings or get_settings()
        self._jwt_secret = settings.jwt_secret
        self._jwt_algorithm = settings.jwt_algorithm
        self._jwt_expiration_minutes = settings.jwt_expiration_minutes
        self._bcrypt_rounds = settings.bcrypt_rounds

    @beartype
    def hash_password(self, password: str) -> str:
        """Hash password using bcrypt."""
        if len(password) < 8:
            raise ValueError("Password must be at least 8 characters long")

        salt = bcrypt.gensalt(rounds=self._bcrypt_rounds)
        hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
        return str(hashed.decode("utf-8"))

    @beartype
    def verify_password(self, password: str, hashed_password: str) -> bool:
        """Verify password against hash."""
        try:
            return bool(
                bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
            )
        except ValueError:
            # Malformed stored hash
            return False

    @beartype
    def create_access_token(
        self,
        subject: str,
        user_type: str,
        insurance_company_id: str | None = None,
        corporate_client_id: str | None = None,
        expires_delta: timedelta | None = None,
    ) -> IssuedToken:
        """Create JWT access token carrying the caller's role and tenant."""
        now = datetime.now(timezone.utc)
        if expires_delta is None:
            expires_delta = timedelta(minutes=self._jwt_expiration_minutes)

        payload = {
            "sub": subject,
            "exp": now + expires_delta,
            "iat": now,
            "jti": str(uuid.uuid4()),
            "user_type": user_type,
            "insurance_company_id": insurance_company_id,
            "corporate_client_id": corporate_client_id,
        }
        token = jwt.encode(payload, self._jwt_secret, algorithm=self._jwt_algorithm)

        return IssuedToken(
            access_token=token,
            expires_in=int(expires_delta.total_seconds()),
        )

    @beartype
    def decode_token(self, token: str) -> TokenPayload | None:
        """Decode and validate JWT token; ``None`` when invalid or expired."""
        try:
            payload = jwt.decode(
                token,
                self._jwt_secret,
                algorithms=[self._jwt_algorithm],
            )
        except jwt.InvalidTokenError:
            return None

        try:
            return TokenPayload(
                sub=payload["sub"],
                exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
                iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                jti=payload["jti"],
                user_type=payload["user_type"],
                insurance_company_id=payload.get("insurance_company_id"),
                corporate_client_id=payload.get("corporate_client_id"),
            )
        except KeyError:
            return None


_security: Security | None = None


@beartype
def get_security() -> Security:
    """Get global security instance."""
    global _security
    if _security is None:
        _security = Security()
    return _security
