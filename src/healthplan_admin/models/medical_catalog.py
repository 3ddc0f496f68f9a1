# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Medical catalog models: categories, billable services and items."""

from decimal import Decimal
from enum import Enum
from uuid import UUID

from beartype import beartype
from pydantic import Field

from .base import BaseModelConfig, IdentifiableModel

_CODE_PATTERN = r"^[A-Za-z0-9._-]+$"


class MedicalServiceType(str, Enum):
    """Kind of billable medical service."""

    CONSULTATION = "CONSULTATION"
    PROCEDURE = "PROCEDURE"
    DIAGNOSTIC = "DIAGNOSTIC"
    LABORATORY = "LABORATORY"
    IMAGING = "IMAGING"
    THERAPY = "THERAPY"
    PREVENTIVE = "PREVENTIVE"
    OTHER = "OTHER"


class MedicalItemType(str, Enum):
    """Kind of billable medical item."""

    DRUG = "DRUG"
    SUPPLY = "SUPPLY"
    EQUIPMENT = "EQUIPMENT"
    IMPLANT = "IMPLANT"
    OTHER = "OTHER"


@beartype
class MedicalCategoryCreate(BaseModelConfig):
    """Payload for a catalog category."""

    insurance_company_id: UUID
    code: str = Field(..., min_length=1, max_length=50, pattern=_CODE_PATTERN)
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    parent_category_id: UUID | None = None


@beartype
class MedicalCategory(MedicalCategoryCreate, IdentifiableModel):
    """Persisted catalog category."""

    is_active: bool = True


@beartype
class MedicalCategoryUpdate(BaseModelConfig):
    """Partial update of a category."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    is_active: bool | None = None


@beartype
class MedicalServiceCreate(BaseModelConfig):
    """Payload for a billable service."""

    insurance_company_id: UUID
    category_id: UUID
    code: str = Field(..., min_length=1, max_length=50, pattern=_CODE_PATTERN)
    coding_system: str | None = Field(default=None, max_length=50)
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    type: MedicalServiceType = MedicalServiceType.OTHER
    base_price: Decimal = Field(..., ge=0, decimal_places=2)
    standard_duration_minutes: int | None = Field(default=None, ge=0)
    requires_prior_auth: bool = False


@beartype
class MedicalService(MedicalServiceCreate, IdentifiableModel):
    """Persisted billable service."""

    is_active: bool = True


@beartype
class MedicalServiceUpdate(BaseModelConfig):
    """Partial update of a service."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    base_price: Decimal | None = Field(default=None, ge=0, decimal_places=2)
    requires_prior_auth: bool | None = None
    is_active: bool | None = None


@beartype
class MedicalItemCreate(BaseModelConfig):
    """Payload for a billable item."""

    insurance_company_id: UUID
    category_id: UUID
    code: str = Field(..., min_length=1, max_length=50, pattern=_CODE_PATTERN)
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    type: MedicalItemType = MedicalItemType.OTHER
    unit: str = Field(default="unit", min_length=1, max_length=30)
    base_price: Decimal = Field(..., ge=0, decimal_places=2)
    requires_prior_auth: bool = False
    brand_name: str | None = Field(default=None, max_length=200)
    manufacturer: str | None = Field(default=None, max_length=200)


@beartype
class MedicalItem(MedicalItemCreate, IdentifiableModel):
    """Persisted billable item."""

    is_active: bool = True


@beartype
class MedicalItemUpdate(BaseModelConfig):
    """Partial update of an item."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    base_price: Decimal | None = Field(default=None, ge=0, decimal_places=2)
    requires_prior_auth: bool | None = None
    is_active: bool | None = None
