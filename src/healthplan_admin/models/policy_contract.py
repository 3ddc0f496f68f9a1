# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Policy contract models and the contract lifecycle.

A policy contract binds one member to one insurance company for a period.
Contracts move through a small state machine; the analytics engine only
ever reads them.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from beartype import beartype
from pydantic import Field, model_validator

from .base import BaseModelConfig, IdentifiableModel


class ContractStatus(str, Enum):
    """Lifecycle state of a policy contract."""

    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    CANCELED = "CANCELED"
    RENEWED = "RENEWED"


class CancellationReason(str, Enum):
    """Why a contract was canceled."""

    NON_PAYMENT = "NON_PAYMENT"
    MEMBER_REQUEST = "MEMBER_REQUEST"
    FRAUD = "FRAUD"
    DEATH = "DEATH"
    RELOCATION = "RELOCATION"
    EMPLOYER_TERMINATION = "EMPLOYER_TERMINATION"
    OTHER = "OTHER"


# Allowed status changes; CANCELED and RENEWED are terminal.
CONTRACT_TRANSITIONS: dict[ContractStatus, frozenset[ContractStatus]] = {
    ContractStatus.PENDING: frozenset({ContractStatus.ACTIVE, ContractStatus.CANCELED}),
    ContractStatus.ACTIVE: frozenset(
        {ContractStatus.EXPIRED, ContractStatus.CANCELED, ContractStatus.RENEWED}
    ),
    ContractStatus.EXPIRED: frozenset({ContractStatus.RENEWED}),
    ContractStatus.CANCELED: frozenset(),
    ContractStatus.RENEWED: frozenset(),
}


@beartype
def can_transition(current: ContractStatus, new: ContractStatus) -> bool:
    """Check whether a contract may move from ``current`` to ``new``."""
    return new in CONTRACT_TRANSITIONS[current]


@beartype
class PolicyContractBase(BaseModelConfig):
    """Commercial terms of a contract."""

    policy_type: str = Field(
        ..., min_length=1, max_length=100, description="Product line, e.g. Health"
    )
    start_date: date
    end_date: date
    premium: Decimal = Field(..., ge=0, decimal_places=2)
    coverage_amount: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)

    @model_validator(mode="after")
    @beartype
    def validate_dates(self) -> "PolicyContractBase":
        """Ensure the contract ends after it starts."""
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


@beartype
class PolicyContract(PolicyContractBase, IdentifiableModel):
    """Persisted policy contract."""

    contract_number: str = Field(..., min_length=1, max_length=20)
    insurance_company_id: UUID
    member_id: UUID
    status: ContractStatus = ContractStatus.PENDING
    cancellation_reason: CancellationReason | None = None
    cancellation_date: date | None = None
    previous_contract_id: UUID | None = None


@beartype
class PolicyContractCreate(PolicyContractBase):
    """Payload for enrolling a member in a policy."""

    insurance_company_id: UUID
    member_id: UUID


@beartype
class ContractStatusUpdate(BaseModelConfig):
    """Request to move a contract to a new status."""

    status: ContractStatus


@beartype
class ContractCancellation(BaseModelConfig):
    """Request to cancel a contract."""

    reason: CancellationReason
    effective_date: date | None = Field(
        default=None, description="Defaults to today"
    )
