# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Claim intake and adjudication service."""

import logging
import secrets
import time
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from beartype import beartype

from ..core.result_types import Err, Ok, Result
from ..models.base import utc_now
from ..models.claim import (
    CLAIM_NUMBER_PREFIXES,
    CLAIM_TRANSITIONS,
    Claim,
    ClaimCreate,
    ClaimStatus,
    ClaimStatusUpdate,
    ClaimType,
)
from ..models.policy_contract import ContractStatus, PolicyContract
from ..models.provider import Provider
from ..repositories.base import DuplicateRecordError, Repository
from ..repositories.filters import desc, eq

logger = logging.getLogger(__name__)

MAX_NUMBER_ATTEMPTS = 10


@beartype
def generate_claim_number(claim_type: ClaimType) -> str:
    """Type prefix + last 10 digits of the epoch milliseconds + 4 random digits."""
    millis = str(int(time.time() * 1000))[-10:]
    return f"{CLAIM_NUMBER_PREFIXES[claim_type]}{millis}{secrets.randbelow(10000):04d}"


class ClaimService:
    """Service for claim submission and status changes."""

    def __init__(
        self,
        claims: Repository[Claim],
        contracts: Repository[PolicyContract],
        providers: Repository[Provider],
    ) -> None:
        if not claims or not hasattr(claims, "insert"):
            raise ValueError("Claim repository required")
        if not contracts or not hasattr(contracts, "get"):
            raise ValueError("Policy contract repository required")
        self._claims = claims
        self._contracts = contracts
        self._providers = providers

    @beartype
    async def create(self, claim_data: ClaimCreate) -> Result[Claim, str]:
        """Submit a claim against an ACTIVE contract of the same company and member."""
        company_id = claim_data.insurance_company_id
        contract = await self._contracts.get(claim_data.policy_contract_id)
        if contract is None or contract.insurance_company_id != company_id:
            return Err(f"Policy contract {claim_data.policy_contract_id} not found")
        if contract.member_id != claim_data.member_id:
            return Err(
                f"Invalid claim: contract {contract.contract_number} does not cover "
                f"member {claim_data.member_id}"
            )
        if contract.status != ContractStatus.ACTIVE:
            logger.warning(
                "Rejected claim on %s contract %s",
                contract.status.value,
                contract.contract_number,
            )
            return Err(
                f"Invalid claim: contract {contract.contract_number} is "
                f"{contract.status.value}, not ACTIVE"
            )
        provider = await self._providers.get(claim_data.provider_id)
        if provider is None or provider.insurance_company_id != company_id:
            return Err(f"Provider {claim_data.provider_id} not found")

        for _ in range(MAX_NUMBER_ATTEMPTS):
            now = utc_now()
            claim = Claim(
                id=uuid4(),
                created_at=now,
                updated_at=now,
                claim_number=generate_claim_number(claim_data.claim_type),
                status=ClaimStatus.SUBMITTED,
                **claim_data.model_dump(),
            )
            try:
                claim = await self._claims.insert(claim)
            except DuplicateRecordError:
                continue
            logger.info("Submitted claim %s for %s", claim.claim_number, claim.total_amount)
            return Ok(claim)
        return Err("Could not allocate a unique claim number")

    @beartype
    async def get(self, claim_id: UUID) -> Result[Claim, str]:
        claim = await self._claims.get(claim_id)
        if claim is None:
            return Err(f"Claim {claim_id} not found")
        return Ok(claim)

    @beartype
    async def list_claims(
        self,
        insurance_company_id: UUID,
        *,
        status: ClaimStatus | None = None,
        member_id: UUID | None = None,
        provider_id: UUID | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Result[tuple[list[Claim], int], str]:
        where = (eq("insurance_company_id", insurance_company_id),)
        if status is not None:
            where += (eq("status", status),)
        if member_id is not None:
            where += (eq("member_id", member_id),)
        if provider_id is not None:
            where += (eq("provider_id", provider_id),)
        return Ok(
            await self._claims.find_and_count(
                where, order_by=(desc("created_at"),), limit=limit, offset=offset
            )
        )

    @beartype
    async def update_status(
        self, claim_id: UUID, decision: ClaimStatusUpdate
    ) -> Result[Claim, str]:
        """Move a claim along the adjudication state machine.

        APPROVED defaults the approved amount to the billed total, PAID pays
        out whatever was approved.
        """
        claim = await self._claims.get(claim_id)
        if claim is None:
            return Err(f"Claim {claim_id} not found")

        allowed = CLAIM_TRANSITIONS[claim.status]
        if decision.status not in allowed:
            logger.warning(
                "Rejected claim %s transition %s -> %s",
                claim.claim_number,
                claim.status.value,
                decision.status.value,
            )
            valid = ", ".join(sorted(s.value for s in allowed)) or "none"
            return Err(
                f"Invalid status transition from {claim.status.value} to "
                f"{decision.status.value}. Valid transitions are: {valid}"
            )

        changes: dict[str, Any] = {"status": decision.status}
        if decision.status in (ClaimStatus.APPROVED, ClaimStatus.PARTIALLY_APPROVED):
            approved = (
                decision.approved_amount
                if decision.approved_amount is not None
                else claim.total_amount
            )
            if approved > claim.total_amount:
                return Err(
                    f"Invalid approved amount {approved}: claim total is {claim.total_amount}"
                )
            changes["approved_amount"] = approved
            changes["denial_reason"] = None
        elif decision.status == ClaimStatus.DENIED:
            changes["approved_amount"] = Decimal("0")
            changes["denial_reason"] = decision.denial_reason
        elif decision.status == ClaimStatus.PAID:
            changes["paid_amount"] = claim.approved_amount

        updated = await self._claims.update(claim_id, changes)
        if updated is None:
            return Err(f"Claim {claim_id} not found")
        logger.info("Claim %s is now %s", claim.claim_number, decision.status.value)
        return Ok(updated)
