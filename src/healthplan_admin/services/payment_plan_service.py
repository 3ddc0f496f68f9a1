# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Installment plans over an invoice's balance.

Money paid under a plan is recorded as a completed payment on the invoice,
so the invoice balance and the plan balance move together. A plan whose
next installment is unpaid past its grace period is DEFAULTED by the
overdue check.
"""

import calendar
import logging
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any
from uuid import UUID, uuid4

from beartype import beartype

from ..core.result_types import Err, Ok, Result
from ..models.base import utc_now
from ..models.billing import (
    Invoice,
    InvoiceStatus,
    PaymentCreate,
    PaymentStatus,
)
from ..models.payment_plan import (
    PLAN_TRANSITIONS,
    InstallmentFrequency,
    InstallmentPayment,
    PaymentPlan,
    PaymentPlanCreate,
    PaymentPlanStatus,
)
from ..repositories.base import DuplicateRecordError, Repository
from ..repositories.filters import desc, eq, lt
from .billing_service import CLOSED_INVOICE_STATUSES, MAX_NUMBER_ATTEMPTS, PaymentService

logger = logging.getLogger(__name__)

_DAYS = {InstallmentFrequency.WEEKLY: 7, InstallmentFrequency.BIWEEKLY: 14}
_MONTHS = {
    InstallmentFrequency.MONTHLY: 1,
    InstallmentFrequency.QUARTERLY: 3,
    InstallmentFrequency.ANNUALLY: 12,
}


@beartype
def add_months(day: date, months: int) -> date:
    """Same day ``months`` later, clamped to the end of shorter months."""
    month_index = day.month - 1 + months
    year, month = day.year + month_index // 12, month_index % 12 + 1
    return day.replace(
        year=year, month=month, day=min(day.day, calendar.monthrange(year, month)[1])
    )


@beartype
def installment_due(start: date, frequency: InstallmentFrequency, index: int) -> date:
    """Due date of installment ``index`` (0 is the first, due on ``start``)."""
    if frequency in _DAYS:
        return start + timedelta(days=_DAYS[frequency] * index)
    return add_months(start, _MONTHS[frequency] * index)


class PaymentPlanService:
    """Service for setting up and collecting installment plans."""

    def __init__(
        self,
        plans: Repository[PaymentPlan],
        invoices: Repository[Invoice],
        payments: PaymentService,
    ) -> None:
        if not plans or not hasattr(plans, "insert"):
            raise ValueError("Payment plan repository required")
        if not invoices or not hasattr(invoices, "update"):
            raise ValueError("Invoice repository required")
        self._plans = plans
        self._invoices = invoices
        self._payments = payments

    @beartype
    async def create(self, plan_data: PaymentPlanCreate) -> Result[PaymentPlan, str]:
        invoice = await self._invoices.get(plan_data.invoice_id)
        if invoice is None:
            return Err(f"Invoice {plan_data.invoice_id} not found")
        if invoice.status in CLOSED_INVOICE_STATUSES or invoice.status == InvoiceStatus.PAID:
            return Err(
                f"Invalid payment plan: invoice {invoice.invoice_number} "
                f"is {invoice.status.value}"
            )
        total = plan_data.total_amount or invoice.amount_due
        if total <= 0 or total > invoice.amount_due:
            return Err(
                f"Invalid payment plan: total must be positive and at most the "
                f"amount due ({invoice.amount_due})"
            )
        if await self._plans.exists(
            (eq("invoice_id", invoice.id), eq("status", PaymentPlanStatus.ACTIVE))
        ):
            return Err(
                f"An active payment plan for invoice {invoice.invoice_number} already exists"
            )

        count = plan_data.total_installments
        installment = (total / count).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        fields = plan_data.model_dump(exclude={"total_amount"})
        sequence = await self._plans.count((eq("invoice_id", invoice.id),))
        for _ in range(MAX_NUMBER_ATTEMPTS):
            sequence += 1
            now = utc_now()
            plan = PaymentPlan(
                id=uuid4(),
                created_at=now,
                updated_at=now,
                plan_number=f"PP-{invoice.invoice_number}-{sequence:02d}",
                insurance_company_id=invoice.insurance_company_id,
                member_id=invoice.member_id,
                corporate_client_id=invoice.corporate_client_id,
                status=PaymentPlanStatus.ACTIVE,
                total_amount=total,
                installment_amount=installment,
                end_date=installment_due(plan_data.start_date, plan_data.frequency, count - 1),
                next_due_date=plan_data.start_date,
                **fields,
            )
            try:
                plan = await self._plans.insert(plan)
            except DuplicateRecordError:
                continue
            break
        else:
            return Err("Could not allocate a unique payment plan number")

        if invoice.status in (InvoiceStatus.DRAFT, InvoiceStatus.OVERDUE):
            await self._invoices.update(invoice.id, {"status": InvoiceStatus.PENDING})
        logger.info(
            "Created payment plan %s: %d x %s", plan.plan_number, count, installment
        )
        return Ok(plan)

    @beartype
    async def get(self, plan_id: UUID) -> Result[PaymentPlan, str]:
        plan = await self._plans.get(plan_id)
        if plan is None:
            return Err(f"Payment plan {plan_id} not found")
        return Ok(plan)

    @beartype
    async def list_plans(
        self,
        insurance_company_id: UUID,
        *,
        status: PaymentPlanStatus | None = None,
        invoice_id: UUID | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Result[tuple[list[PaymentPlan], int], str]:
        where = (eq("insurance_company_id", insurance_company_id),)
        if status is not None:
            where += (eq("status", status),)
        if invoice_id is not None:
            where += (eq("invoice_id", invoice_id),)
        return Ok(
            await self._plans.find_and_count(
                where, order_by=(desc("created_at"),), limit=limit, offset=offset
            )
        )

    @beartype
    async def record_payment(
        self, plan_id: UUID, payment: InstallmentPayment
    ) -> Result[PaymentPlan, str]:
        """Collect money under a plan and credit it to the invoice."""
        plan = await self._plans.get(plan_id)
        if plan is None:
            return Err(f"Payment plan {plan_id} not found")
        if plan.status not in (PaymentPlanStatus.ACTIVE, PaymentPlanStatus.DEFAULTED):
            return Err(f"Invalid payment: payment plan {plan.plan_number} is {plan.status.value}")
        if payment.amount > plan.balance:
            return Err(
                f"Invalid payment: amount cannot exceed the plan balance ({plan.balance})"
            )
        method = payment.method or plan.payment_method
        if method is None:
            return Err("Invalid payment: a payment method is required")

        created = await self._payments.create(
            PaymentCreate(
                invoice_id=plan.invoice_id,
                amount=payment.amount,
                method=method,
                payment_date=payment.payment_date,
                reference=payment.reference,
                notes=f"Payment plan {plan.plan_number}",
            )
        )
        if isinstance(created, Err):
            return created
        settled = await self._payments.update_status(
            created.value.id, PaymentStatus.COMPLETED
        )
        if isinstance(settled, Err):
            return settled

        amount_paid = plan.amount_paid + payment.amount
        installments_paid = min(
            int(amount_paid // plan.installment_amount), plan.total_installments
        )
        changes: dict[str, Any] = {
            "amount_paid": amount_paid,
            "installments_paid": installments_paid,
        }
        if amount_paid >= plan.total_amount:
            changes.update(
                status=PaymentPlanStatus.COMPLETED,
                installments_paid=plan.total_installments,
                next_due_date=None,
            )
        else:
            changes["next_due_date"] = installment_due(
                plan.start_date, plan.frequency, installments_paid
            )

        updated = await self._plans.update(plan_id, changes)
        if updated is None:
            return Err(f"Payment plan {plan_id} not found")
        logger.info(
            "Payment plan %s collected %s (%d/%d installments)",
            plan.plan_number,
            payment.amount,
            updated.installments_paid,
            updated.total_installments,
        )
        return Ok(updated)

    @beartype
    async def update_status(
        self, plan_id: UUID, new_status: PaymentPlanStatus
    ) -> Result[PaymentPlan, str]:
        plan = await self._plans.get(plan_id)
        if plan is None:
            return Err(f"Payment plan {plan_id} not found")
        allowed = PLAN_TRANSITIONS[plan.status]
        if new_status not in allowed:
            return Err(
                f"Invalid status transition from {plan.status.value} to "
                f"{new_status.value}. Valid transitions are: "
                f"{', '.join(sorted(s.value for s in allowed)) or 'none'}"
            )
        if new_status == PaymentPlanStatus.COMPLETED and plan.balance > 0:
            return Err(
                f"Invalid status change: payment plan {plan.plan_number} "
                f"still owes {plan.balance}"
            )

        updated = await self._plans.update(plan_id, {"status": new_status})
        if updated is None:
            return Err(f"Payment plan {plan_id} not found")
        logger.info("Payment plan %s is now %s", plan.plan_number, new_status.value)
        return Ok(updated)

    @beartype
    async def delete(self, plan_id: UUID) -> Result[PaymentPlan, str]:
        """Remove a plan nothing has been paid under."""
        plan = await self._plans.get(plan_id)
        if plan is None:
            return Err(f"Payment plan {plan_id} not found")
        if plan.amount_paid > 0:
            return Err(
                f"Delete conflict: payment plan {plan.plan_number} has payments; "
                "cancel it instead"
            )
        if not await self._plans.delete(plan_id):
            return Err(f"Payment plan {plan_id} not found")
        logger.info("Deleted payment plan %s", plan.plan_number)
        return Ok(plan)

    @beartype
    async def mark_overdue(
        self, insurance_company_id: UUID, today: date | None = None
    ) -> Result[list[PaymentPlan], str]:
        """Default ACTIVE plans whose next installment is past its grace period."""
        today = today or utc_now().date()
        late = await self._plans.find(
            (
                eq("insurance_company_id", insurance_company_id),
                eq("status", PaymentPlanStatus.ACTIVE),
                lt("next_due_date", today),
            )
        )
        defaulted: list[PaymentPlan] = []
        for plan in late:
            if plan.next_due_date is None:
                continue
            if plan.next_due_date + timedelta(days=plan.grace_period_days) >= today:
                continue
            updated = await self._plans.update(
                plan.id, {"status": PaymentPlanStatus.DEFAULTED}
            )
            if updated is not None:
                defaulted.append(updated)
                logger.warning(
                    "Payment plan %s defaulted; installment due %s is unpaid",
                    plan.plan_number,
                    plan.next_due_date,
                )
        return Ok(defaulted)
