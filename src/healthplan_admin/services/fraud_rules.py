# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Rule checks run against a single claim and its history."""

from datetime import timedelta
from typing import Any

from attrs import field, frozen
from beartype import beartype

from ..models.claim import Claim
from ..models.fraud import (
    CompatibilityConfig,
    DuplicateConfig,
    FraudRule,
    FrequencyConfig,
    RuleType,
    UpcodingConfig,
)
from ..models.provider import Provider
from ..repositories.base import Repository
from ..repositories.filters import between, eq, gte, in_, lte, ne


@frozen
class Violation:
    """Why a claim broke a rule, and how sure the check is (0-100)."""

    explanation: str = field()
    confidence: int = field()
    data: dict[str, Any] = field(factory=dict)


class RuleEvaluator:
    """Evaluates rules with read access to claims and providers."""

    def __init__(self, claims: Repository[Claim], providers: Repository[Provider]) -> None:
        self._claims = claims
        self._providers = providers

    @beartype
    async def evaluate(self, rule: FraudRule, claim: Claim) -> Violation | None:
        checks = {
            RuleType.FREQUENCY: self.check_frequency,
            RuleType.COMPATIBILITY: self.check_compatibility,
            RuleType.UPCODING: self.check_upcoding,
            RuleType.DUPLICATE: self.check_duplicate,
        }
        return await checks[rule.type](rule.parsed_config(), claim)

    async def check_frequency(
        self, config: FrequencyConfig, claim: Claim
    ) -> Violation | None:
        """Count the member's claims for the codes in the window ending on this one."""
        start = claim.service_date - timedelta(days=config.timeframe_days)
        earlier = await self._claims.find(
            (
                eq("member_id", claim.member_id),
                ne("id", claim.id),
                in_("service_code", config.procedure_codes),
                gte("service_date", start),
                lte("service_date", claim.service_date),
            )
        )
        occurrences = len(earlier) + (claim.service_code in config.procedure_codes)
        if occurrences <= config.max_occurrences:
            return None
        return Violation(
            explanation=(
                f"Found {occurrences} occurrences of procedures "
                f"{', '.join(config.procedure_codes)} within {config.timeframe_days} "
                f"days, exceeding maximum of {config.max_occurrences}"
            ),
            confidence=min(100, int(occurrences / config.max_occurrences * 70)),
            data={
                "occurrences": occurrences,
                "timeframeDays": config.timeframe_days,
                "maxOccurrences": config.max_occurrences,
                "matchingClaims": [str(c.id) for c in earlier],
            },
        )

    async def check_compatibility(
        self, config: CompatibilityConfig, claim: Claim
    ) -> Violation | None:
        """Other codes billed for the member on the same day that clash with this one."""
        partners = {
            b if a == claim.service_code else a
            for a, b in config.incompatible_codes
            if claim.service_code in (a, b)
        }
        if not partners:
            return None
        clashes = await self._claims.find(
            (
                eq("member_id", claim.member_id),
                ne("id", claim.id),
                eq("service_date", claim.service_date),
                in_("service_code", partners),
            )
        )
        if not clashes:
            return None
        codes = sorted({c.service_code for c in clashes})
        return Violation(
            explanation=(
                f"Procedure {claim.service_code} was billed on {claim.service_date} "
                f"together with incompatible procedure(s) {', '.join(codes)}"
            ),
            confidence=90,
            data={
                "serviceCode": claim.service_code,
                "incompatibleCodes": codes,
                "clashingClaims": [str(c.id) for c in clashes],
            },
        )

    async def check_upcoding(
        self, config: UpcodingConfig, claim: Claim
    ) -> Violation | None:
        """Provider bills the higher code of a pair more often than the threshold."""
        provider = await self._providers.get(claim.provider_id)
        specialties = set(provider.specialties) if provider else set()

        worst: dict[str, Any] | None = None
        for pattern in config.upcoding_patterns:
            if claim.service_code != pattern.higher_code:
                continue
            if pattern.specialties and not specialties & set(pattern.specialties):
                continue
            history = await self._claims.find(
                (
                    eq("provider_id", claim.provider_id),
                    in_("service_code", (pattern.lower_code, pattern.higher_code)),
                )
            )
            if len(history) < config.min_claims:
                continue
            higher = sum(1 for c in history if c.service_code == pattern.higher_code)
            ratio = higher / len(history)
            if ratio <= pattern.threshold:
                continue
            score = ratio / pattern.threshold * 80
            if worst is None or score > worst["score"]:
                worst = {
                    "score": score,
                    "lowerCode": pattern.lower_code,
                    "higherCode": pattern.higher_code,
                    "providerRatio": round(ratio, 4),
                    "threshold": pattern.threshold,
                    "claimsReviewed": len(history),
                }

        if worst is None:
            return None
        score = worst.pop("score")
        return Violation(
            explanation=(
                f"Potential upcoding: provider bills {worst['higherCode']} in "
                f"{worst['providerRatio']:.0%} of {worst['lowerCode']}/"
                f"{worst['higherCode']} claims, above {worst['threshold']:.0%}"
            ),
            confidence=min(100, int(score)),
            data=worst,
        )

    async def check_duplicate(
        self, config: DuplicateConfig, claim: Claim
    ) -> Violation | None:
        """Same member, provider and code billed again within the window."""
        window = timedelta(days=config.window_days)
        twins = await self._claims.find(
            (
                eq("member_id", claim.member_id),
                eq("provider_id", claim.provider_id),
                eq("service_code", claim.service_code),
                ne("id", claim.id),
                between(
                    "service_date", claim.service_date - window, claim.service_date + window
                ),
            )
        )
        if not twins:
            return None
        return Violation(
            explanation=(
                f"Procedure {claim.service_code} from the same provider was already "
                f"claimed for this member in {', '.join(c.claim_number for c in twins)}"
            ),
            confidence=95,
            data={"duplicateClaims": [str(c.id) for c in twins]},
        )
