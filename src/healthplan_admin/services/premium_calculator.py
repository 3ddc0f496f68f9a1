# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Premium calculation for policy products.

Each covered person pays an equal share of the family premium, scaled by
the age factor of their band:

    share = base_premium * tier_factor * age_factor * family_size_factor / size

Loadings and discounts are percentages of the sum of shares. The total is
never negative.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from beartype import beartype

from ..core.result_types import Err, Ok, Result
from ..models.policy_product import TIER_FACTORS, PolicyProduct, PremiumModifiers
from ..schemas.premium import (
    AdjustmentAmount,
    MemberPremium,
    PremiumAdjustment,
    PremiumQuote,
)

CENT = Decimal("0.01")


@beartype
def money(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


class PremiumCalculator:
    """Rating tables applied to a set of members."""

    @beartype
    @staticmethod
    def age_on(date_of_birth: date, day: date) -> int:
        """Completed years of age on ``day``."""
        had_birthday = (day.month, day.day) >= (date_of_birth.month, date_of_birth.day)
        return day.year - date_of_birth.year - (0 if had_birthday else 1)

    @beartype
    @staticmethod
    def age_factor(modifiers: PremiumModifiers, age: int) -> Decimal:
        """Factor of the band containing ``age``; 1 when no band does."""
        for band in modifiers.age_factors:
            if band.min_age <= age <= band.max_age:
                return band.factor
        return Decimal("1")

    @beartype
    @staticmethod
    def family_size_factor(modifiers: PremiumModifiers, size: int) -> Decimal:
        """Factor for ``size`` people.

        Families larger than the table use the factor of its largest size;
        1 when the table has nothing at or below ``size``.
        """
        candidates = [f for f in modifiers.family_size_factors if f.size <= size]
        if not candidates:
            return Decimal("1")
        return max(candidates, key=lambda f: f.size).factor

    @beartype
    @staticmethod
    def adjustments(
        subtotal: Decimal, items: list[PremiumAdjustment]
    ) -> list[AdjustmentAmount]:
        return [
            AdjustmentAmount(
                reason=item.reason,
                percentage=item.percentage,
                amount=money(subtotal * item.percentage / Decimal("100")),
            )
            for item in items
        ]

    @beartype
    @staticmethod
    def quote(
        product: PolicyProduct,
        members: list[tuple[UUID, date]],
        quote_date: date,
        loadings: list[PremiumAdjustment] | None = None,
        discounts: list[PremiumAdjustment] | None = None,
    ) -> Result[PremiumQuote, str]:
        """Price ``members`` (id, date of birth) under ``product``.

        The first member is the policyholder; the rest are dependents.
        """
        if not members:
            return Err("Invalid quote: at least one member is required")

        rules = product.eligibility_rules
        modifiers = product.premium_modifiers
        size = len(members)
        tier_factor = TIER_FACTORS[product.tier]
        family_factor = PremiumCalculator.family_size_factor(modifiers, size)
        per_person = product.base_premium * tier_factor * family_factor / size

        member_premiums: list[MemberPremium] = []
        for member_id, born in members:
            age = PremiumCalculator.age_on(born, quote_date)
            if age < rules.min_age or age > rules.max_age:
                return Err(
                    f"Invalid quote: member {member_id} aged {age} is outside the "
                    f"eligible ages {rules.min_age}-{rules.max_age}"
                )
            factor = PremiumCalculator.age_factor(modifiers, age)
            member_premiums.append(
                MemberPremium(
                    member_id=member_id,
                    age=age,
                    age_factor=factor,
                    premium=money(per_person * factor),
                )
            )

        subtotal = sum((m.premium for m in member_premiums), Decimal("0"))
        loading_amounts = PremiumCalculator.adjustments(subtotal, loadings or [])
        discount_amounts = PremiumCalculator.adjustments(subtotal, discounts or [])
        total = (
            subtotal
            + sum((a.amount for a in loading_amounts), Decimal("0"))
            - sum((a.amount for a in discount_amounts), Decimal("0"))
        )
        average_age_factor = sum(
            (m.age_factor for m in member_premiums), Decimal("0")
        ) / size

        return Ok(
            PremiumQuote(
                policy_product_id=product.id,
                quote_date=quote_date,
                frequency=product.premium_frequency,
                base_premium=product.base_premium,
                tier_factor=tier_factor,
                family_size=size,
                family_size_factor=family_factor,
                average_age_factor=average_age_factor.quantize(Decimal("0.0001")),
                subtotal=money(subtotal),
                member_premiums=member_premiums,
                loadings=loading_amounts,
                discounts=discount_amounts,
                total_premium=max(money(total), Decimal("0")),
            )
        )
