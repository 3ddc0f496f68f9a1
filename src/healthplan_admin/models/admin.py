# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Admin user models: login accounts and their roles."""

from enum import Enum
from uuid import UUID

from beartype import beartype
from pydantic import EmailStr, Field

from .base import BaseModelConfig, IdentifiableModel


class UserType(str, Enum):
    """Role of a login account.

    ADMIN is the platform operator and passes every role gate;
    INSURANCE_ADMIN is bound to one insurance company.
    """

    ADMIN = "ADMIN"
    INSURANCE_ADMIN = "INSURANCE_ADMIN"
    CORPORATE_ADMIN = "CORPORATE_ADMIN"
    PROVIDER_ADMIN = "PROVIDER_ADMIN"
    STAFF = "STAFF"
    MEMBER = "MEMBER"


@beartype
class AdminUser(IdentifiableModel):
    """Persisted login account."""

    username: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    password_hash: str = Field(..., min_length=1)
    user_type: UserType
    insurance_company_id: UUID | None = None
    corporate_client_id: UUID | None = None
    is_active: bool = True


@beartype
class AdminUserCreate(BaseModelConfig):
    """Data required to create a login account."""

    username: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    user_type: UserType
    insurance_company_id: UUID | None = None
    corporate_client_id: UUID | None = None
