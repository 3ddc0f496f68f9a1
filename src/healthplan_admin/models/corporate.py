# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Corporate client and coverage plan models.

A corporate client is an employer that buys group cover from one insurance
company. Its coverage plans describe, per service type, how much of a claim
the insurer pays.
"""

from decimal import Decimal
from enum import Enum
from uuid import UUID

from beartype import beartype
from pydantic import EmailStr, Field, model_validator

from .base import BaseModelConfig, IdentifiableModel


class ServiceType(str, Enum):
    """Medical service families a coverage plan can apply to."""

    GENERAL_MEDICAL = "GENERAL_MEDICAL"
    SPECIALIST = "SPECIALIST"
    DENTAL = "DENTAL"
    VISION = "VISION"
    MATERNITY = "MATERNITY"
    EMERGENCY = "EMERGENCY"
    PRESCRIPTION = "PRESCRIPTION"
    LABORATORY = "LABORATORY"
    IMAGING = "IMAGING"
    PHYSIOTHERAPY = "PHYSIOTHERAPY"
    MENTAL_HEALTH = "MENTAL_HEALTH"
    CHRONIC_CARE = "CHRONIC_CARE"


class CoverageType(str, Enum):
    """How a service type is covered."""

    FULL = "FULL"
    PARTIAL = "PARTIAL"
    CAPPED = "CAPPED"
    EXCLUDED = "EXCLUDED"


@beartype
class CoveragePlanBase(BaseModelConfig):
    """Coverage terms for one service type."""

    service_type: ServiceType
    coverage_type: CoverageType
    coverage_percentage: Decimal = Field(
        default=Decimal("100"), ge=0, le=100, decimal_places=2
    )
    max_amount: Decimal | None = Field(default=None, ge=0, decimal_places=2)
    annual_limit: Decimal | None = Field(default=None, ge=0, decimal_places=2)
    waiting_period_days: int = Field(default=0, ge=0, le=3650)
    pre_authorization_required: bool = False
    exclusions: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    @beartype
    def validate_coverage_terms(self) -> "CoveragePlanBase":
        """Capped cover needs a cap; full cover is always 100%."""
        if self.coverage_type == CoverageType.CAPPED and self.max_amount is None:
            raise ValueError("Capped coverage requires max_amount")
        if (
            self.coverage_type == CoverageType.FULL
            and self.coverage_percentage != Decimal("100")
        ):
            raise ValueError("Full coverage must have a coverage_percentage of 100")
        return self


@beartype
class CoveragePlan(CoveragePlanBase, IdentifiableModel):
    """Persisted coverage plan."""

    corporate_client_id: UUID
    is_active: bool = True


@beartype
class CoveragePlanCreate(CoveragePlanBase):
    """Coverage plan submitted together with a new corporate client."""


@beartype
class CoveragePlanUpdate(BaseModelConfig):
    """Partial update of a coverage plan."""

    coverage_type: CoverageType | None = None
    coverage_percentage: Decimal | None = Field(default=None, ge=0, le=100)
    max_amount: Decimal | None = Field(default=None, ge=0)
    annual_limit: Decimal | None = Field(default=None, ge=0)
    waiting_period_days: int | None = Field(default=None, ge=0, le=3650)
    pre_authorization_required: bool | None = None
    exclusions: list[str] | None = None
    is_active: bool | None = None


@beartype
class CorporateClientBase(BaseModelConfig):
    """Employer attributes."""

    name: str = Field(..., min_length=1, max_length=200)
    registration_number: str = Field(..., min_length=1, max_length=100)
    address: str = Field(..., min_length=1, max_length=500)
    phone: str = Field(..., min_length=5, max_length=30)
    email: EmailStr | None = None
    website: str | None = Field(default=None, max_length=200)
    contact_name: str = Field(..., min_length=1, max_length=200)
    contact_position: str | None = Field(default=None, max_length=100)
    contact_phone: str | None = Field(default=None, max_length=30)
    contact_email: EmailStr | None = None


@beartype
class CorporateClient(CorporateClientBase, IdentifiableModel):
    """Persisted corporate client."""

    insurance_company_id: UUID
    is_active: bool = True


@beartype
class CorporateAdminCredentials(BaseModelConfig):
    """Login created for the employer's own administrator."""

    username: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=8, max_length=128)
    email: EmailStr


@beartype
class CorporateClientCreate(CorporateClientBase):
    """Payload for onboarding a corporate client."""

    insurance_company_id: UUID
    coverage_plans: list[CoveragePlanCreate] = Field(default_factory=list)
    admin_credentials: CorporateAdminCredentials


@beartype
class CorporateStatusUpdate(BaseModelConfig):
    """Activate or deactivate a corporate client."""

    is_active: bool
    reason: str | None = Field(default=None, max_length=500)


@beartype
class CorporateClientDetail(BaseModelConfig):
    """Corporate client with its coverage plans."""

    client: CorporateClient
    coverage_plans: list[CoveragePlan]
