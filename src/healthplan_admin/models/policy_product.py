# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Policy product models: the insurer's catalogue of sellable plans.

A product carries its benefits, who may enrol, and the factors the premium
calculator applies. Products are edited while DRAFT and frozen once sold.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from beartype import beartype
from pydantic import Field, model_validator

from .base import BaseModelConfig, IdentifiableModel
from .corporate import ServiceType


class PolicyType(str, Enum):
    """Who a product insures."""

    INDIVIDUAL = "INDIVIDUAL"
    FAMILY = "FAMILY"
    GROUP = "GROUP"
    CORPORATE = "CORPORATE"


class ProductStatus(str, Enum):
    """Sales state of a product."""

    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class ProductTier(str, Enum):
    """Coverage tier; each tier scales the base premium."""

    BASIC = "BASIC"
    STANDARD = "STANDARD"
    PREMIUM = "PREMIUM"
    EXECUTIVE = "EXECUTIVE"


class PremiumFrequency(str, Enum):
    """How often the quoted premium is billed."""

    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    SEMI_ANNUAL = "SEMI_ANNUAL"
    ANNUAL = "ANNUAL"


class LimitType(str, Enum):
    """What a benefit's coverage limit applies to."""

    PER_VISIT = "PER_VISIT"
    PER_YEAR = "PER_YEAR"
    LIFETIME = "LIFETIME"


class CopaymentType(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED = "FIXED"


class PreExistingConditions(str, Enum):
    """Underwriting stance on pre-existing conditions."""

    ACCEPT = "ACCEPT"
    REJECT = "REJECT"
    WAITING_PERIOD = "WAITING_PERIOD"


TIER_FACTORS: dict[ProductTier, Decimal] = {
    ProductTier.BASIC: Decimal("1.0"),
    ProductTier.STANDARD: Decimal("1.2"),
    ProductTier.PREMIUM: Decimal("1.5"),
    ProductTier.EXECUTIVE: Decimal("2.0"),
}

PRODUCT_TRANSITIONS: dict[ProductStatus, frozenset[ProductStatus]] = {
    ProductStatus.DRAFT: frozenset({ProductStatus.ACTIVE, ProductStatus.INACTIVE}),
    ProductStatus.ACTIVE: frozenset({ProductStatus.INACTIVE}),
    ProductStatus.INACTIVE: frozenset({ProductStatus.ACTIVE}),
}


@beartype
class Copayment(BaseModelConfig):
    """Member's share of a covered service."""

    type: CopaymentType
    value: Decimal = Field(..., ge=0, decimal_places=2)

    @model_validator(mode="after")
    @beartype
    def validate_share(self) -> "Copayment":
        if self.type == CopaymentType.PERCENTAGE and self.value > 100:
            raise ValueError("Percentage copayment cannot exceed 100")
        return self


@beartype
class Benefit(BaseModelConfig):
    """Cover for one service type."""

    service_type: ServiceType
    coverage_limit: Decimal = Field(..., ge=0, decimal_places=2)
    limit_type: LimitType = LimitType.PER_YEAR
    copayment: Copayment | None = None


@beartype
class EligibilityRules(BaseModelConfig):
    """Who may enrol in a product."""

    min_age: int = Field(default=0, ge=0, le=150)
    max_age: int = Field(default=150, ge=0, le=150)
    pre_existing_conditions: PreExistingConditions = PreExistingConditions.ACCEPT
    required_documents: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    @beartype
    def validate_ages(self) -> "EligibilityRules":
        if self.max_age < self.min_age:
            raise ValueError("max_age cannot be below min_age")
        return self


@beartype
class AgeFactor(BaseModelConfig):
    """Premium multiplier for members aged ``min_age`` to ``max_age``."""

    min_age: int = Field(..., ge=0)
    max_age: int = Field(..., ge=0)
    factor: Decimal = Field(..., ge=0, le=10)


@beartype
class FamilySizeFactor(BaseModelConfig):
    """Premium multiplier for a policy covering ``size`` people."""

    size: int = Field(..., ge=1)
    factor: Decimal = Field(..., ge=0, le=20)


def _default_age_factors() -> list[AgeFactor]:
    bands = (
        (0, 17, "0.5"),
        (18, 29, "0.8"),
        (30, 39, "1.0"),
        (40, 49, "1.2"),
        (50, 59, "1.5"),
        (60, 69, "2.0"),
        (70, 150, "2.5"),
    )
    return [AgeFactor(min_age=lo, max_age=hi, factor=Decimal(f)) for lo, hi, f in bands]


def _default_family_size_factors() -> list[FamilySizeFactor]:
    factors = ("1.0", "1.8", "2.4", "2.8", "3.0", "3.2")
    return [
        FamilySizeFactor(size=size, factor=Decimal(f))
        for size, f in enumerate(factors, start=1)
    ]


@beartype
class PremiumModifiers(BaseModelConfig):
    """Rating tables of a product."""

    age_factors: list[AgeFactor] = Field(default_factory=_default_age_factors)
    family_size_factors: list[FamilySizeFactor] = Field(
        default_factory=_default_family_size_factors
    )

    @model_validator(mode="after")
    @beartype
    def validate_tables(self) -> "PremiumModifiers":
        """Age bands are well formed and do not overlap."""
        bands = sorted(self.age_factors, key=lambda b: b.min_age)
        for band in bands:
            if band.max_age < band.min_age:
                raise ValueError(f"Age band {band.min_age}-{band.max_age} is inverted")
        for previous, band in zip(bands, bands[1:]):
            if band.min_age <= previous.max_age:
                raise ValueError(
                    f"Age bands {previous.min_age}-{previous.max_age} and "
                    f"{band.min_age}-{band.max_age} overlap"
                )
        sizes = [f.size for f in self.family_size_factors]
        if len(sizes) != len(set(sizes)):
            raise ValueError("Family size factors must have distinct sizes")
        return self


@beartype
class PolicyProductBase(BaseModelConfig):
    """Editable terms of a product."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=5000)
    type: PolicyType
    tier: ProductTier = ProductTier.BASIC
    waiting_period_days: int = Field(default=0, ge=0, le=3650)
    max_members: int | None = Field(default=None, ge=1, le=100)
    base_premium: Decimal = Field(..., ge=0, decimal_places=2)
    premium_frequency: PremiumFrequency = PremiumFrequency.MONTHLY
    benefits: list[Benefit] = Field(default_factory=list)
    eligibility_rules: EligibilityRules = Field(default_factory=EligibilityRules)
    premium_modifiers: PremiumModifiers = Field(default_factory=PremiumModifiers)
    valid_from: date
    valid_to: date | None = None

    @model_validator(mode="after")
    @beartype
    def validate_product(self) -> "PolicyProductBase":
        if self.valid_to is not None and self.valid_to < self.valid_from:
            raise ValueError("valid_to cannot be before valid_from")
        service_types = [b.service_type for b in self.benefits]
        if len(service_types) != len(set(service_types)):
            raise ValueError("Each service type may appear in only one benefit")
        return self


@beartype
class PolicyProductCreate(PolicyProductBase):
    """Payload for adding a product to a company's catalogue."""

    insurance_company_id: UUID
    code: str = Field(..., min_length=1, max_length=50)


@beartype
class PolicyProduct(PolicyProductCreate, IdentifiableModel):
    """Persisted product."""

    status: ProductStatus = ProductStatus.DRAFT


@beartype
class PolicyProductUpdate(BaseModelConfig):
    """Partial update of a DRAFT product."""

    code: str | None = Field(default=None, min_length=1, max_length=50)
    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, min_length=1, max_length=5000)
    tier: ProductTier | None = None
    waiting_period_days: int | None = Field(default=None, ge=0, le=3650)
    max_members: int | None = Field(default=None, ge=1, le=100)
    base_premium: Decimal | None = Field(default=None, ge=0, decimal_places=2)
    premium_frequency: PremiumFrequency | None = None
    benefits: list[Benefit] | None = None
    eligibility_rules: EligibilityRules | None = None
    premium_modifiers: PremiumModifiers | None = None
    valid_from: date | None = None
    valid_to: date | None = None


@beartype
class ProductStatusUpdate(BaseModelConfig):
    status: ProductStatus
