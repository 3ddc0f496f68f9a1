# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Invoice and payment services.

An invoice starts as a draft owing its full total. Completed payments
reduce ``amount_due`` and move the invoice to ``partially_paid`` or
``paid``; refunding a completed payment puts the money back on the bill.
"""

import logging
import time
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from beartype import beartype

from ..core.result_types import Err, Ok, Result
from ..models.base import utc_now
from ..models.billing import (
    INVOICE_NUMBER_PREFIXES,
    Invoice,
    InvoiceCreate,
    InvoiceStatus,
    InvoiceType,
    Payment,
    PaymentCreate,
    PaymentStatus,
)
from ..models.policy_contract import PolicyContract
from ..repositories.base import DuplicateRecordError, Repository
from ..repositories.filters import between, desc, eq

logger = logging.getLogger(__name__)

MAX_NUMBER_ATTEMPTS = 10

# Invoices that can no longer take payments.
CLOSED_INVOICE_STATUSES = frozenset({InvoiceStatus.CANCELLED, InvoiceStatus.VOID})


@beartype
def format_invoice_number(invoice_type: InvoiceType, day: date, sequence: int) -> str:
    """``{prefix}{YYMM}-{NNNN}``, e.g. ``P2503-0007``."""
    return f"{INVOICE_NUMBER_PREFIXES[invoice_type]}{day:%y%m}-{sequence:04d}"


@beartype
def generate_transaction_id() -> str:
    """``TXN-`` + last 8 digits of the epoch milliseconds + 8 hex characters."""
    millis = str(int(time.time() * 1000))[-8:]
    return f"TXN-{millis}-{uuid4().hex[:8]}"


class InvoiceService:
    """Service for issuing invoices and tracking their settlement."""

    def __init__(
        self,
        invoices: Repository[Invoice],
        contracts: Repository[PolicyContract],
    ) -> None:
        if not invoices or not hasattr(invoices, "insert"):
            raise ValueError("Invoice repository required")
        self._invoices = invoices
        self._contracts = contracts

    async def _last_sequence(self, invoice_type: InvoiceType, today: date) -> int:
        """Highest sequence number issued this month for the invoice type, or 0."""
        stem = format_invoice_number(invoice_type, today, 0)[:-4]
        latest = await self._invoices.find(
            (between("invoice_number", f"{stem}0000", f"{stem}9999"),),
            order_by=(desc("invoice_number"),),
            limit=1,
        )
        if not latest:
            return 0
        suffix = latest[0].invoice_number.rsplit("-", 1)[1]
        return int(suffix) if suffix.isdigit() else 0

    @beartype
    async def create(self, invoice_data: InvoiceCreate) -> Result[Invoice, str]:
        if invoice_data.policy_contract_id is not None:
            contract = await self._contracts.get(invoice_data.policy_contract_id)
            if (
                contract is None
                or contract.insurance_company_id != invoice_data.insurance_company_id
            ):
                return Err(f"Policy contract {invoice_data.policy_contract_id} not found")

        total = invoice_data.subtotal + invoice_data.tax - invoice_data.discount
        now = utc_now()
        sequence = await self._last_sequence(invoice_data.type, now.date())
        for _ in range(MAX_NUMBER_ATTEMPTS):
            sequence += 1
            invoice = Invoice(
                id=uuid4(),
                created_at=now,
                updated_at=now,
                invoice_number=format_invoice_number(invoice_data.type, now.date(), sequence),
                status=InvoiceStatus.DRAFT,
                total=total,
                amount_paid=Decimal("0"),
                amount_due=total,
                **invoice_data.model_dump(),
            )
            try:
                invoice = await self._invoices.insert(invoice)
            except DuplicateRecordError:
                # Another invoice took this sequence number first
                continue
            logger.info("Issued invoice %s for %s", invoice.invoice_number, total)
            return Ok(invoice)
        return Err("Could not allocate a unique invoice number")

    @beartype
    async def get(self, invoice_id: UUID) -> Result[Invoice, str]:
        invoice = await self._invoices.get(invoice_id)
        if invoice is None:
            return Err(f"Invoice {invoice_id} not found")
        return Ok(invoice)

    @beartype
    async def list_invoices(
        self,
        insurance_company_id: UUID,
        *,
        status: InvoiceStatus | None = None,
        invoice_type: InvoiceType | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Result[tuple[list[Invoice], int], str]:
        where = (eq("insurance_company_id", insurance_company_id),)
        if status is not None:
            where += (eq("status", status),)
        if invoice_type is not None:
            where += (eq("type", invoice_type),)
        return Ok(
            await self._invoices.find_and_count(
                where, order_by=(desc("issue_date"),), limit=limit, offset=offset
            )
        )

    @beartype
    async def update_status(
        self, invoice_id: UUID, status: InvoiceStatus
    ) -> Result[Invoice, str]:
        """Set the status; PAID settles the invoice in full."""
        invoice = await self._invoices.get(invoice_id)
        if invoice is None:
            return Err(f"Invoice {invoice_id} not found")

        changes: dict[str, Any] = {"status": status}
        if status == InvoiceStatus.PAID:
            changes.update(
                paid_date=utc_now(), amount_paid=invoice.total, amount_due=Decimal("0")
            )
        elif status != InvoiceStatus.PARTIALLY_PAID:
            changes["paid_date"] = None

        updated = await self._invoices.update(invoice_id, changes)
        if updated is None:
            return Err(f"Invoice {invoice_id} not found")
        logger.info("Invoice %s is now %s", invoice.invoice_number, status.value)
        return Ok(updated)


class PaymentService:
    """Service for recording payments and applying them to invoices."""

    def __init__(
        self,
        payments: Repository[Payment],
        invoices: Repository[Invoice],
    ) -> None:
        if not payments or not hasattr(payments, "insert"):
            raise ValueError("Payment repository required")
        if not invoices or not hasattr(invoices, "update"):
            raise ValueError("Invoice repository required")
        self._payments = payments
        self._invoices = invoices

    async def _apply(self, invoice: Invoice, amount: Decimal) -> Invoice | None:
        """Credit a completed payment to the invoice."""
        amount_paid = invoice.amount_paid + amount
        changes: dict[str, Any] = {
            "amount_paid": amount_paid,
            "amount_due": max(invoice.total - amount_paid, Decimal("0")),
        }
        if amount_paid >= invoice.total:
            changes.update(status=InvoiceStatus.PAID, paid_date=utc_now())
        elif amount_paid > 0:
            changes["status"] = InvoiceStatus.PARTIALLY_PAID
        return await self._invoices.update(invoice.id, changes)

    async def _revert(self, invoice: Invoice, amount: Decimal) -> Invoice | None:
        """Take a refunded payment back off the invoice."""
        amount_paid = max(invoice.amount_paid - amount, Decimal("0"))
        changes: dict[str, Any] = {
            "amount_paid": amount_paid,
            "amount_due": invoice.total - amount_paid,
        }
        if amount_paid <= 0:
            changes.update(status=InvoiceStatus.PENDING, paid_date=None)
        elif amount_paid < invoice.total:
            changes["status"] = InvoiceStatus.PARTIALLY_PAID
        return await self._invoices.update(invoice.id, changes)

    @beartype
    async def create(self, payment_data: PaymentCreate) -> Result[Payment, str]:
        """Record a PENDING payment; it touches the invoice once COMPLETED."""
        invoice = await self._invoices.get(payment_data.invoice_id)
        if invoice is None:
            return Err(f"Invoice {payment_data.invoice_id} not found")
        if invoice.status in CLOSED_INVOICE_STATUSES:
            return Err(
                f"Invalid payment: invoice {invoice.invoice_number} is {invoice.status.value}"
            )
        if payment_data.amount > invoice.amount_due:
            logger.warning(
                "Rejected payment of %s on invoice %s owing %s",
                payment_data.amount,
                invoice.invoice_number,
                invoice.amount_due,
            )
            return Err(
                f"Invalid payment: amount cannot exceed the amount due ({invoice.amount_due})"
            )

        now = utc_now()
        payment = Payment(
            id=uuid4(),
            created_at=now,
            updated_at=now,
            insurance_company_id=invoice.insurance_company_id,
            transaction_id=generate_transaction_id(),
            status=PaymentStatus.PENDING,
            **payment_data.model_dump(),
        )
        try:
            payment = await self._payments.insert(payment)
        except DuplicateRecordError:
            return Err(f"Payment {payment.transaction_id} already exists")
        logger.info(
            "Recorded payment %s of %s on invoice %s",
            payment.transaction_id,
            payment.amount,
            invoice.invoice_number,
        )
        return Ok(payment)

    @beartype
    async def get(self, payment_id: UUID) -> Result[Payment, str]:
        payment = await self._payments.get(payment_id)
        if payment is None:
            return Err(f"Payment {payment_id} not found")
        return Ok(payment)

    @beartype
    async def list_payments(
        self,
        insurance_company_id: UUID,
        *,
        invoice_id: UUID | None = None,
        status: PaymentStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Result[tuple[list[Payment], int], str]:
        where = (eq("insurance_company_id", insurance_company_id),)
        if invoice_id is not None:
            where += (eq("invoice_id", invoice_id),)
        if status is not None:
            where += (eq("status", status),)
        return Ok(
            await self._payments.find_and_count(
                where, order_by=(desc("payment_date"),), limit=limit, offset=offset
            )
        )

    @beartype
    async def update_status(
        self, payment_id: UUID, status: PaymentStatus
    ) -> Result[Payment, str]:
        """Change a payment's status and keep its invoice balance in step."""
        payment = await self._payments.get(payment_id)
        if payment is None:
            return Err(f"Payment {payment_id} not found")
        if payment.status == PaymentStatus.REFUNDED:
            return Err(f"Invalid status change: payment {payment.transaction_id} is refunded")
        if status == PaymentStatus.REFUNDED and payment.status != PaymentStatus.COMPLETED:
            return Err("Invalid status change: only COMPLETED payments can be refunded")
        if payment.status == PaymentStatus.COMPLETED and status not in (
            PaymentStatus.COMPLETED,
            PaymentStatus.REFUNDED,
        ):
            return Err("Invalid status change: a COMPLETED payment can only be refunded")

        invoice = await self._invoices.get(payment.invoice_id)
        if invoice is None:
            return Err(f"Invoice {payment.invoice_id} not found")

        changes: dict[str, Any] = {"status": status}
        if status == PaymentStatus.COMPLETED and payment.status != PaymentStatus.COMPLETED:
            if payment.amount > invoice.amount_due:
                return Err(
                    f"Invalid payment: amount cannot exceed the amount due ({invoice.amount_due})"
                )
            await self._apply(invoice, payment.amount)
        elif status == PaymentStatus.REFUNDED:
            await self._revert(invoice, payment.amount)
            changes["refund_date"] = utc_now()

        updated = await self._payments.update(payment_id, changes)
        if updated is None:
            return Err(f"Payment {payment_id} not found")
        logger.info("Payment %s is now %s", payment.transaction_id, status.value)
        return Ok(updated)
