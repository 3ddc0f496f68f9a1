# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Invoice based revenue, expense and outstanding-balance figures."""

import logging
from datetime import date
from decimal import Decimal
from uuid import UUID

from attrs import frozen
from beartype import beartype

from ...models.billing import (
    OUTSTANDING_INVOICE_STATUSES,
    Invoice,
    InvoiceStatus,
    InvoiceType,
)
from ...repositories.base import Repository
from ...repositories.filters import between, eq, in_
from ...schemas.analytics import (
    ExpenseSummary,
    FinancialSummary,
    MonthlyRevenue,
    Period,
    RevenueSummary,
)
from .period import month_period

logger = logging.getLogger(__name__)


@frozen
class InvoiceStats:
    """Totals of one invoice type over a window."""

    count: int
    total: Decimal
    paid: Decimal

    @property
    def outstanding(self) -> Decimal:
        return self.total - self.paid


class FinancialAggregator:
    """Financial roll-ups over a company's invoices."""

    def __init__(self, invoices: Repository[Invoice]) -> None:
        if not invoices or not hasattr(invoices, "find"):
            raise ValueError("Invoice repository required")
        self._invoices = invoices

    @beartype
    async def invoice_stats(
        self, insurance_company_id: UUID, invoice_type: InvoiceType, period: Period
    ) -> InvoiceStats:
        """Count, billed total and fully-paid total of invoices issued in window."""
        invoices = await self._invoices.find(
            (
                eq("insurance_company_id", insurance_company_id),
                eq("type", invoice_type),
                between("issue_date", period.start_date, period.end_date),
            )
        )
        return InvoiceStats(
            count=len(invoices),
            total=sum((i.total for i in invoices), Decimal("0")),
            paid=sum(
                (i.total for i in invoices if i.status == InvoiceStatus.PAID),
                Decimal("0"),
            ),
        )

    @beartype
    async def outstanding_payments(self, insurance_company_id: UUID) -> Decimal:
        """Amount still due on every open invoice, regardless of issue date."""
        return await self._invoices.sum(
            "amount_due",
            (
                eq("insurance_company_id", insurance_company_id),
                in_("status", OUTSTANDING_INVOICE_STATUSES),
            ),
        )

    @beartype
    async def financial_summary(
        self, insurance_company_id: UUID, period: Period
    ) -> FinancialSummary:
        premiums = await self.invoice_stats(
            insurance_company_id, InvoiceType.PREMIUM, period
        )
        claims = await self.invoice_stats(insurance_company_id, InvoiceType.CLAIM, period)
        outstanding = await self.outstanding_payments(insurance_company_id)
        logger.debug(
            "Financial summary for %s %s..%s: %d premium, %d claim invoices",
            insurance_company_id,
            period.start_date,
            period.end_date,
            premiums.count,
            claims.count,
        )

        return FinancialSummary(
            revenue=RevenueSummary(
                total=premiums.total,
                collected=premiums.paid,
                outstanding=premiums.outstanding,
            ),
            expenses=ExpenseSummary(
                total=claims.total,
                paid=claims.paid,
                pending=claims.outstanding,
            ),
            outstanding_payments=outstanding,
            profit=premiums.paid - claims.paid,
            period=period,
        )

    @beartype
    async def monthly_revenue(
        self, insurance_company_id: UUID, year: int
    ) -> list[MonthlyRevenue]:
        """Collected premium per calendar month of ``year``; always twelve rows."""
        rows = []
        for month in range(1, 13):
            window = month_period(date(year, month, 1))
            revenue = await self._invoices.sum(
                "total",
                (
                    eq("insurance_company_id", insurance_company_id),
                    eq("type", InvoiceType.PREMIUM),
                    eq("status", InvoiceStatus.PAID),
                    between("issue_date", window.start_date, window.end_date),
                ),
            )
            rows.append(MonthlyRevenue(month=month, revenue=revenue))
        return rows
