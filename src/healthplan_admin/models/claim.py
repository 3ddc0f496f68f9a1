# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Claim domain models with strict validation.

This module defines the claim entity, its creation and status-change
payloads, and the adjudication state machine.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from beartype import beartype
from pydantic import Field, field_validator, model_validator

from .base import BaseModelConfig, IdentifiableModel


class ClaimType(str, Enum):
    """Enumeration of claim types."""

    MEDICAL = "MEDICAL"
    DENTAL = "DENTAL"
    VISION = "VISION"
    PHARMACY = "PHARMACY"
    MENTAL_HEALTH = "MENTAL_HEALTH"


class ClaimStatus(str, Enum):
    """Enumeration of claim processing states."""

    SUBMITTED = "SUBMITTED"
    PENDING = "PENDING"
    IN_REVIEW = "IN_REVIEW"
    APPROVED = "APPROVED"
    PARTIALLY_APPROVED = "PARTIALLY_APPROVED"
    DENIED = "DENIED"
    APPEALED = "APPEALED"
    PAID = "PAID"
    VOID = "VOID"


CLAIM_NUMBER_PREFIXES: dict[ClaimType, str] = {
    ClaimType.MEDICAL: "MED",
    ClaimType.DENTAL: "DEN",
    ClaimType.VISION: "VIS",
    ClaimType.PHARMACY: "RX",
    ClaimType.MENTAL_HEALTH: "MH",
}

CLAIM_TRANSITIONS: dict[ClaimStatus, frozenset[ClaimStatus]] = {
    ClaimStatus.SUBMITTED: frozenset(
        {ClaimStatus.PENDING, ClaimStatus.IN_REVIEW, ClaimStatus.DENIED}
    ),
    ClaimStatus.PENDING: frozenset(
        {
            ClaimStatus.IN_REVIEW,
            ClaimStatus.APPROVED,
            ClaimStatus.PARTIALLY_APPROVED,
            ClaimStatus.DENIED,
        }
    ),
    ClaimStatus.IN_REVIEW: frozenset(
        {ClaimStatus.APPROVED, ClaimStatus.PARTIALLY_APPROVED, ClaimStatus.DENIED}
    ),
    ClaimStatus.APPROVED: frozenset({ClaimStatus.PAID, ClaimStatus.VOID}),
    ClaimStatus.PARTIALLY_APPROVED: frozenset(
        {ClaimStatus.PAID, ClaimStatus.APPEALED, ClaimStatus.VOID}
    ),
    ClaimStatus.DENIED: frozenset({ClaimStatus.APPEALED, ClaimStatus.VOID}),
    ClaimStatus.APPEALED: frozenset(
        {
            ClaimStatus.IN_REVIEW,
            ClaimStatus.APPROVED,
            ClaimStatus.PARTIALLY_APPROVED,
            ClaimStatus.DENIED,
        }
    ),
    ClaimStatus.PAID: frozenset({ClaimStatus.VOID}),
    ClaimStatus.VOID: frozenset(),
}

# Statuses whose approved amount is an incurred expense.
EXPENSED_CLAIM_STATUSES: frozenset[ClaimStatus] = frozenset(
    {ClaimStatus.APPROVED, ClaimStatus.PARTIALLY_APPROVED, ClaimStatus.PAID}
)

# Statuses that end adjudication; used for processing-time metrics.
DECIDED_CLAIM_STATUSES: frozenset[ClaimStatus] = frozenset(
    {ClaimStatus.APPROVED, ClaimStatus.DENIED, ClaimStatus.PARTIALLY_APPROVED}
)


@beartype
class ClaimBase(BaseModelConfig):
    """Base claim attributes shared across all claim operations."""

    claim_type: ClaimType = ClaimType.MEDICAL
    member_id: UUID
    policy_contract_id: UUID
    provider_id: UUID
    service_code: str = Field(
        ..., min_length=1, max_length=50, description="Catalog code of the service"
    )
    service_date: date
    total_amount: Decimal = Field(..., gt=0, decimal_places=2)
    diagnosis_code: str | None = Field(default=None, max_length=20)
    is_emergency: bool = False
    notes: str | None = Field(default=None, max_length=2000)


@beartype
class Claim(ClaimBase, IdentifiableModel):
    """Persisted claim."""

    claim_number: str = Field(..., min_length=1, max_length=30)
    insurance_company_id: UUID
    status: ClaimStatus = ClaimStatus.SUBMITTED
    approved_amount: Decimal = Field(default=Decimal("0"), ge=0)
    paid_amount: Decimal = Field(default=Decimal("0"), ge=0)
    denial_reason: str | None = None


@beartype
class ClaimCreate(ClaimBase):
    """Payload for submitting a claim."""

    insurance_company_id: UUID

    @field_validator("service_date")
    @classmethod
    @beartype
    def validate_service_date(cls, v: date) -> date:
        """Ensure the service has already happened."""
        if v > date.today():
            raise ValueError("Service date cannot be in the future")
        return v


@beartype
class ClaimStatusUpdate(BaseModelConfig):
    """Adjudication decision for a claim."""

    status: ClaimStatus
    approved_amount: Decimal | None = Field(default=None, ge=0)
    denial_reason: str | None = Field(default=None, max_length=1000)

    @model_validator(mode="after")
    @beartype
    def validate_decision(self) -> "ClaimStatusUpdate":
        """Approvals carry an amount and denials a reason."""
        if (
            self.status == ClaimStatus.PARTIALLY_APPROVED
            and self.approved_amount is None
        ):
            raise ValueError("Partial approval requires approved_amount")
        if self.status == ClaimStatus.DENIED and not self.denial_reason:
            raise ValueError("Denial requires denial_reason")
        return self
