# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Billing models: invoices and the payments settling them.

Premium invoices are revenue, claim invoices are expenses; the financial
analytics read both.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from beartype import beartype
from pydantic import Field, model_validator

from .base import BaseModelConfig, IdentifiableModel


class InvoiceType(str, Enum):
    """What an invoice bills for."""

    PREMIUM = "premium"
    CLAIM = "claim"
    REFUND = "refund"
    FEE = "fee"
    OTHER = "other"


class InvoiceStatus(str, Enum):
    """Settlement state of an invoice."""

    DRAFT = "draft"
    PENDING = "pending"
    PAID = "paid"
    PARTIALLY_PAID = "partially_paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"
    VOID = "void"


class PaymentStatus(str, Enum):
    """Processing state of a payment."""

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class PaymentMethod(str, Enum):
    """Payment instrument."""

    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    BANK_TRANSFER = "bank_transfer"
    CASH = "cash"
    CHECK = "check"
    MOBILE_MONEY = "mobile_money"
    DIGITAL_WALLET = "digital_wallet"


INVOICE_NUMBER_PREFIXES: dict[InvoiceType, str] = {
    InvoiceType.PREMIUM: "P",
    InvoiceType.CLAIM: "C",
    InvoiceType.REFUND: "R",
    InvoiceType.FEE: "F",
    InvoiceType.OTHER: "O",
}

# Invoices that still have money owed on them.
OUTSTANDING_INVOICE_STATUSES: frozenset[InvoiceStatus] = frozenset(
    {InvoiceStatus.PENDING, InvoiceStatus.PARTIALLY_PAID, InvoiceStatus.OVERDUE}
)


@beartype
class InvoiceCreate(BaseModelConfig):
    """Payload for issuing an invoice."""

    insurance_company_id: UUID
    type: InvoiceType
    policy_contract_id: UUID | None = None
    member_id: UUID | None = None
    corporate_client_id: UUID | None = None
    issue_date: date
    due_date: date
    subtotal: Decimal = Field(..., ge=0, decimal_places=2)
    tax: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    discount: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    notes: str | None = Field(default=None, max_length=2000)

    @model_validator(mode="after")
    @beartype
    def validate_invoice(self) -> "InvoiceCreate":
        """Due date follows issue date; discount cannot exceed the bill."""
        if self.due_date < self.issue_date:
            raise ValueError("due_date cannot be before issue_date")
        if self.discount > self.subtotal + self.tax:
            raise ValueError("discount cannot exceed subtotal plus tax")
        return self


@beartype
class Invoice(InvoiceCreate, IdentifiableModel):
    """Persisted invoice."""

    invoice_number: str = Field(..., min_length=1, max_length=30)
    status: InvoiceStatus = InvoiceStatus.DRAFT
    total: Decimal = Field(..., ge=0)
    amount_paid: Decimal = Field(default=Decimal("0"), ge=0)
    amount_due: Decimal = Field(..., ge=0)
    paid_date: datetime | None = None


@beartype
class InvoiceStatusUpdate(BaseModelConfig):
    """Request to change an invoice's status."""

    status: InvoiceStatus


@beartype
class PaymentCreate(BaseModelConfig):
    """Payload for recording a payment against an invoice."""

    invoice_id: UUID
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    method: PaymentMethod
    payment_date: date
    reference: str | None = Field(default=None, max_length=100)
    payer_name: str | None = Field(default=None, max_length=200)
    notes: str | None = Field(default=None, max_length=2000)


@beartype
class Payment(PaymentCreate, IdentifiableModel):
    """Persisted payment."""

    insurance_company_id: UUID
    transaction_id: str = Field(..., min_length=1, max_length=40)
    status: PaymentStatus = PaymentStatus.PENDING
    refund_date: datetime | None = None


@beartype
class PaymentStatusUpdate(BaseModelConfig):
    """Request to change a payment's status."""

    status: PaymentStatus
