# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Payment plans: an invoice's balance split into scheduled installments."""

from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from beartype import beartype
from pydantic import Field, model_validator

from .base import BaseModelConfig, IdentifiableModel
from .billing import PaymentMethod


class PaymentPlanStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    DEFAULTED = "defaulted"
    CANCELLED = "cancelled"


class InstallmentFrequency(str, Enum):
    """Spacing between installment due dates."""

    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUALLY = "annually"


PLAN_TRANSITIONS: dict[PaymentPlanStatus, frozenset[PaymentPlanStatus]] = {
    PaymentPlanStatus.ACTIVE: frozenset(
        {
            PaymentPlanStatus.COMPLETED,
            PaymentPlanStatus.DEFAULTED,
            PaymentPlanStatus.CANCELLED,
        }
    ),
    PaymentPlanStatus.DEFAULTED: frozenset(
        {PaymentPlanStatus.ACTIVE, PaymentPlanStatus.CANCELLED}
    ),
    PaymentPlanStatus.COMPLETED: frozenset(),
    PaymentPlanStatus.CANCELLED: frozenset(),
}


@beartype
class PaymentPlanCreate(BaseModelConfig):
    """Request to spread an invoice over installments.

    ``total_amount`` defaults to the invoice's amount due.
    """

    invoice_id: UUID
    frequency: InstallmentFrequency = InstallmentFrequency.MONTHLY
    total_installments: int = Field(..., ge=2, le=120)
    total_amount: Decimal | None = Field(default=None, gt=0, decimal_places=2)
    start_date: date
    grace_period_days: int = Field(default=5, ge=0, le=90)
    payment_method: PaymentMethod | None = None
    auto_debit: bool = False
    notes: str | None = Field(default=None, max_length=2000)


@beartype
class PaymentPlan(IdentifiableModel):
    """Persisted payment plan."""

    plan_number: str = Field(..., min_length=1, max_length=40)
    invoice_id: UUID
    insurance_company_id: UUID
    member_id: UUID | None = None
    corporate_client_id: UUID | None = None
    status: PaymentPlanStatus = PaymentPlanStatus.ACTIVE
    frequency: InstallmentFrequency
    total_amount: Decimal = Field(..., gt=0)
    installment_amount: Decimal = Field(..., gt=0)
    total_installments: int = Field(..., ge=2)
    installments_paid: int = Field(default=0, ge=0)
    amount_paid: Decimal = Field(default=Decimal("0"), ge=0)
    start_date: date
    end_date: date
    # None once the plan is paid off
    next_due_date: date | None
    grace_period_days: int = Field(default=5, ge=0)
    payment_method: PaymentMethod | None = None
    auto_debit: bool = False
    notes: str | None = None

    @model_validator(mode="after")
    @beartype
    def validate_plan(self) -> "PaymentPlan":
        if self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        if self.amount_paid > self.total_amount:
            raise ValueError("amount_paid cannot exceed total_amount")
        if self.installments_paid > self.total_installments:
            raise ValueError("installments_paid cannot exceed total_installments")
        return self

    @property
    def balance(self) -> Decimal:
        return self.total_amount - self.amount_paid


@beartype
class InstallmentPayment(BaseModelConfig):
    """A payment made under a plan; the method defaults to the plan's."""

    amount: Decimal = Field(..., gt=0, decimal_places=2)
    payment_date: date
    method: PaymentMethod | None = None
    reference: str | None = Field(default=None, max_length=100)


@beartype
class PaymentPlanStatusUpdate(BaseModelConfig):
    status: PaymentPlanStatus
