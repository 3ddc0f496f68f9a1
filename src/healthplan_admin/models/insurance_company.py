# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Insurance company (tenant) models."""

from beartype import beartype
from pydantic import EmailStr, Field

from .base import BaseModelConfig, IdentifiableModel


@beartype
class InsuranceCompanyBase(BaseModelConfig):
    """Attributes shared by create and read models."""

    name: str = Field(..., min_length=1, max_length=200)
    code: str = Field(
        ...,
        min_length=2,
        max_length=20,
        pattern=r"^[A-Z0-9_-]+$",
        description="Short unique company code",
    )
    email: EmailStr
    phone: str = Field(..., min_length=5, max_length=30)
    address: str = Field(..., min_length=1, max_length=500)
    website: str | None = Field(default=None, max_length=200)
    license_number: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=2000)


@beartype
class InsuranceCompany(InsuranceCompanyBase, IdentifiableModel):
    """Persisted insurance company."""

    is_active: bool = True


@beartype
class InsuranceCompanyCreate(InsuranceCompanyBase):
    """Payload for registering a new insurance company."""


@beartype
class InsuranceCompanyUpdate(BaseModelConfig):
    """Partial update; unset fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, min_length=5, max_length=30)
    address: str | None = Field(default=None, min_length=1, max_length=500)
    website: str | None = Field(default=None, max_length=200)
    license_number: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=2000)
    is_active: bool | None = None
