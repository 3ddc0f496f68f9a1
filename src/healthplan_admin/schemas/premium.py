# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Premium quote request and breakdown."""

from datetime import date
from decimal import Decimal
from uuid import UUID

from beartype import beartype
from pydantic import Field

from ..models.base import BaseModelConfig
from ..models.policy_product import PremiumFrequency


@beartype
class PremiumAdjustment(BaseModelConfig):
    """A loading or discount, as a percentage of the member subtotal."""

    reason: str = Field(..., min_length=1, max_length=200)
    percentage: Decimal = Field(..., ge=0, le=100, decimal_places=2)


@beartype
class PremiumQuoteRequest(BaseModelConfig):
    """Members to price and any special terms."""

    member_id: UUID
    dependent_ids: list[UUID] = Field(default_factory=list, max_length=20)
    loadings: list[PremiumAdjustment] = Field(default_factory=list)
    discounts: list[PremiumAdjustment] = Field(default_factory=list)
    quote_date: date | None = Field(
        default=None, description="Day ages are measured on; today when omitted"
    )


@beartype
class MemberPremium(BaseModelConfig):
    member_id: UUID
    age: int = Field(..., ge=0)
    age_factor: Decimal
    premium: Decimal


@beartype
class AdjustmentAmount(BaseModelConfig):
    reason: str
    percentage: Decimal
    amount: Decimal


@beartype
class PremiumQuote(BaseModelConfig):
    """Priced premium for one billing period, with the factors used."""

    policy_product_id: UUID
    quote_date: date
    frequency: PremiumFrequency
    base_premium: Decimal
    tier_factor: Decimal
    family_size: int = Field(..., ge=1)
    family_size_factor: Decimal
    average_age_factor: Decimal
    subtotal: Decimal
    member_premiums: list[MemberPremium]
    loadings: list[AdjustmentAmount]
    discounts: list[AdjustmentAmount]
    total_premium: Decimal = Field(..., ge=0)
