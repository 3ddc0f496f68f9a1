# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Per policy type figures: distribution, renewal and profitability."""

import logging
from collections import Counter, defaultdict
from decimal import Decimal
from uuid import UUID

from beartype import beartype

from ...models.billing import Invoice, InvoiceType
from ...models.claim import EXPENSED_CLAIM_STATUSES, Claim
from ...models.policy_contract import ContractStatus, PolicyContract
from ...repositories.base import Repository
from ...repositories.filters import between, eq, in_
from ...schemas.analytics import (
    Period,
    PolicyDistributionEntry,
    PolicyProfitabilityEntry,
    RenewalRateEntry,
)
from .period import rate

logger = logging.getLogger(__name__)


class PolicyAggregator:
    """Policy-type breakdowns for one company."""

    def __init__(
        self,
        contracts: Repository[PolicyContract],
        invoices: Repository[Invoice],
        claims: Repository[Claim],
    ) -> None:
        if not contracts or not hasattr(contracts, "find"):
            raise ValueError("Policy contract repository required")
        if not invoices or not hasattr(invoices, "find"):
            raise ValueError("Invoice repository required")
        if not claims or not hasattr(claims, "find"):
            raise ValueError("Claim repository required")
        self._contracts = contracts
        self._invoices = invoices
        self._claims = claims

    @beartype
    async def distribution(
        self, insurance_company_id: UUID
    ) -> list[PolicyDistributionEntry]:
        """ACTIVE contracts per policy type; only types present are listed."""
        active = await self._contracts.find(
            (
                eq("insurance_company_id", insurance_company_id),
                eq("status", ContractStatus.ACTIVE),
            )
        )
        counts = Counter(c.policy_type for c in active)
        total = len(active)
        return [
            PolicyDistributionEntry(
                policy_type=policy_type,
                count=count,
                percentage=rate(count, total),
            )
            for policy_type, count in sorted(counts.items())
        ]

    @beartype
    async def renewal_rates(
        self, insurance_company_id: UUID, period: Period
    ) -> list[RenewalRateEntry]:
        """Renewal rate for every policy type the company has ever sold."""
        company = eq("insurance_company_id", insurance_company_id)
        policy_types = sorted(await self._contracts.distinct("policy_type", (company,)))
        ending = await self._contracts.find(
            (company, between("end_date", period.start_date, period.end_date))
        )

        eligible: Counter[str] = Counter(c.policy_type for c in ending)
        renewed: Counter[str] = Counter(
            c.policy_type for c in ending if c.status == ContractStatus.RENEWED
        )
        return [
            RenewalRateEntry(
                policy_type=policy_type,
                eligible_count=eligible[policy_type],
                renewed_count=renewed[policy_type],
                renewal_rate=rate(renewed[policy_type], eligible[policy_type]),
            )
            for policy_type in policy_types
        ]

    @beartype
    async def profitability(
        self, insurance_company_id: UUID, period: Period
    ) -> list[PolicyProfitabilityEntry]:
        """Premium revenue against incurred claim cost per policy type.

        Revenue is the total of premium invoices issued in the window;
        expenses are the approved amounts of claims serviced in the window
        that reached an approved or paid state. Both are attributed to the
        policy type of the contract they reference.
        """
        company = eq("insurance_company_id", insurance_company_id)
        contracts = await self._contracts.find((company,))
        type_of: dict[UUID, str] = {c.id: c.policy_type for c in contracts}

        revenue: defaultdict[str, Decimal] = defaultdict(Decimal)
        premium_invoices = await self._invoices.find(
            (
                company,
                eq("type", InvoiceType.PREMIUM),
                between("issue_date", period.start_date, period.end_date),
            )
        )
        for invoice in premium_invoices:
            policy_type = type_of.get(invoice.policy_contract_id)
            if policy_type is not None:
                revenue[policy_type] += invoice.total

        expenses: defaultdict[str, Decimal] = defaultdict(Decimal)
        incurred = await self._claims.find(
            (
                company,
                in_("status", EXPENSED_CLAIM_STATUSES),
                between("service_date", period.start_date, period.end_date),
            )
        )
        for claim in incurred:
            policy_type = type_of.get(claim.policy_contract_id)
            if policy_type is not None:
                expenses[policy_type] += claim.approved_amount

        entries = []
        for policy_type in sorted(set(type_of.values())):
            premium_revenue = revenue[policy_type]
            claim_expenses = expenses[policy_type]
            profit = premium_revenue - claim_expenses
            entries.append(
                PolicyProfitabilityEntry(
                    policy_type=policy_type,
                    premium_revenue=premium_revenue,
                    claim_expenses=claim_expenses,
                    profit=profit,
                    profit_margin=rate(profit, premium_revenue),
                )
            )
        return entries
