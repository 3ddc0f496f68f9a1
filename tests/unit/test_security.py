"""Unit tests for password hashing and JWT handling."""

from datetime import timedelta
from uuid import uuid4

import jwt
import pytest

from healthplan_admin.core.config import Settings
from healthplan_admin.core.security import Security


class TestPasswords:
    """Test bcrypt hashing."""

    def test_hash_and_verify(self, security: Security) -> None:
        hashed = security.hash_password("correct-horse")
        assert hashed != "correct-horse"
        assert security.verify_password("correct-horse", hashed)
        assert not security.verify_password("wrong-horse", hashed)

    def test_short_password_rejected(self, security: Security) -> None:
        with pytest.raises(ValueError, match="at least 8 characters"):
            security.hash_password("short")

    def test_malformed_hash_does_not_verify(self, security: Security) -> None:
        assert security.verify_password("anything", "not-a-bcrypt-hash") is False


class TestTokens:
    """Test access token issue and decode."""

    def test_round_trip_carries_role_and_tenant(self, security: Security) -> None:
        company_id = str(uuid4())
        issued = security.create_access_token(
            subject="user-1",
            user_type="INSURANCE_ADMIN",
            insurance_company_id=company_id,
        )
        assert issued.expires_in == 60 * 60

        payload = security.decode_token(issued.access_token)
        assert payload is not None
        assert payload.sub == "user-1"
        assert payload.user_type == "INSURANCE_ADMIN"
        assert payload.insurance_company_id == company_id
        assert payload.corporate_client_id is None

    def test_expired_token_is_rejected(self, security: Security) -> None:
        issued = security.create_access_token(
            subject="user-1", user_type="ADMIN", expires_delta=timedelta(seconds=-1)
        )
        assert security.decode_token(issued.access_token) is None

    def test_token_signed_with_other_secret_is_rejected(
        self, security: Security
    ) -> None:
        other = Security(Settings(jwt_secret="another-secret-that-is-long-enough-for-hs256"))
        issued = other.create_access_token(subject="user-1", user_type="ADMIN")
        assert security.decode_token(issued.access_token) is None

    def test_token_without_role_is_rejected(self, settings: Settings) -> None:
        token = jwt.encode(
            {"sub": "user-1", "exp": 4102444800, "iat": 0, "jti": "x"},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        assert Security(settings).decode_token(token) is None

    def test_garbage_is_rejected(self, security: Security) -> None:
        assert security.decode_token("not.a.token") is None
