# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Authentication schemas."""

from datetime import datetime
from uuid import UUID

from beartype import beartype
from pydantic import EmailStr, Field

from ..models.admin import AdminUser, UserType
from ..models.base import BaseModelConfig


@beartype
class CurrentUser(BaseModelConfig):
    """Current authenticated user, as carried by the bearer token."""

    user_id: UUID = Field(..., description="Admin user identifier")
    user_type: UserType = Field(..., description="Role of the account")
    insurance_company_id: UUID | None = Field(
        default=None, description="Company the account is bound to"
    )
    corporate_client_id: UUID | None = Field(
        default=None, description="Corporate client the account is bound to"
    )

    @property
    def is_admin(self) -> bool:
        return self.user_type == UserType.ADMIN


@beartype
class LoginRequest(BaseModelConfig):
    """Username and password login."""

    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=128)


@beartype
class TokenResponse(BaseModelConfig):
    """Issued bearer token."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer")
    expires_in: int = Field(..., ge=0, description="Seconds until expiration")


@beartype
class AdminUserPublic(BaseModelConfig):
    """Login account without its password hash."""

    id: UUID
    username: str
    email: EmailStr
    user_type: UserType
    insurance_company_id: UUID | None = None
    corporate_client_id: UUID | None = None
    is_active: bool
    created_at: datetime

    @classmethod
    def from_user(cls, user: AdminUser) -> "AdminUserPublic":
        return cls.model_validate(
            user.model_dump(exclude={"password_hash", "updated_at"})
        )
