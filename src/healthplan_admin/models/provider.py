# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Healthcare provider models."""

from enum import Enum
from uuid import UUID

from beartype import beartype
from pydantic import EmailStr, Field

from .base import BaseModelConfig, IdentifiableModel


class ProviderCategory(str, Enum):
    """Kind of healthcare provider."""

    HEALTH_FACILITY = "HEALTH_FACILITY"
    PHARMACY = "PHARMACY"
    LABORATORY = "LABORATORY"
    IMAGING_CENTER = "IMAGING_CENTER"
    INDIVIDUAL_PRACTITIONER = "INDIVIDUAL_PRACTITIONER"


@beartype
class ProviderBase(BaseModelConfig):
    """Provider attributes."""

    name: str = Field(..., min_length=1, max_length=200)
    category: ProviderCategory = ProviderCategory.HEALTH_FACILITY
    license_number: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=5, max_length=30)
    email: EmailStr | None = None
    address: str = Field(..., min_length=1, max_length=500)
    specialties: list[str] = Field(default_factory=list)


@beartype
class Provider(ProviderBase, IdentifiableModel):
    """Persisted provider in an insurance company's network."""

    insurance_company_id: UUID
    is_active: bool = True


@beartype
class ProviderCreate(ProviderBase):
    """Payload for registering a provider."""

    insurance_company_id: UUID


@beartype
class ProviderStatusUpdate(BaseModelConfig):
    """Activate or deactivate a provider."""

    is_active: bool
