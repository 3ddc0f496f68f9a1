# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Policy contract lifecycle service.

Contracts are created PENDING and move through the transition table in
``models.policy_contract``. Renewal closes the old contract as RENEWED and
opens a new PENDING one for the following year.
"""

import logging
import secrets
import time
from datetime import date, timedelta
from uuid import UUID, uuid4

from beartype import beartype

from ..core.result_types import Err, Ok, Result
from ..models.base import utc_now
from ..models.member import Member
from ..models.policy_contract import (
    CONTRACT_TRANSITIONS,
    ContractCancellation,
    ContractStatus,
    PolicyContract,
    PolicyContractCreate,
    can_transition,
)
from ..repositories.base import DuplicateRecordError, Repository
from ..repositories.filters import desc, eq

logger = logging.getLogger(__name__)

MAX_NUMBER_ATTEMPTS = 10


@beartype
def generate_contract_number() -> str:
    """``PC`` + last 6 digits of the epoch milliseconds + 3 random digits."""
    millis = str(int(time.time() * 1000))[-6:]
    return f"PC{millis}{secrets.randbelow(1000):03d}"


@beartype
def one_year_after(day: date) -> date:
    """Same calendar day next year; 29 February maps to 28 February."""
    try:
        return day.replace(year=day.year + 1)
    except ValueError:
        return day.replace(year=day.year + 1, day=28)


class PolicyContractService:
    """Service for policy contract enrollment and lifecycle."""

    def __init__(
        self,
        contracts: Repository[PolicyContract],
        members: Repository[Member],
    ) -> None:
        if not contracts or not hasattr(contracts, "insert"):
            raise ValueError("Policy contract repository required")
        if not members or not hasattr(members, "get"):
            raise ValueError("Member repository required")
        self._contracts = contracts
        self._members = members

    async def _insert_with_number(self, **fields: object) -> Result[PolicyContract, str]:
        """Insert a contract, drawing a fresh number on every collision."""
        for _ in range(MAX_NUMBER_ATTEMPTS):
            number = generate_contract_number()
            if await self._contracts.exists((eq("contract_number", number),)):
                continue
            now = utc_now()
            contract = PolicyContract(
                id=uuid4(),
                created_at=now,
                updated_at=now,
                contract_number=number,
                **fields,
            )
            try:
                return Ok(await self._contracts.insert(contract))
            except DuplicateRecordError:
                continue
        return Err("Could not allocate a unique contract number")

    @beartype
    async def create(
        self, contract_data: PolicyContractCreate
    ) -> Result[PolicyContract, str]:
        """Enroll a member; the member must belong to the contract's company."""
        member = await self._members.get(contract_data.member_id)
        if member is None or member.insurance_company_id != contract_data.insurance_company_id:
            return Err(f"Member {contract_data.member_id} not found")

        result = await self._insert_with_number(
            status=ContractStatus.PENDING, **contract_data.model_dump()
        )
        if isinstance(result, Ok):
            logger.info(
                "Created contract %s for member %s",
                result.value.contract_number,
                member.id,
            )
        return result

    @beartype
    async def get(self, contract_id: UUID) -> Result[PolicyContract, str]:
        contract = await self._contracts.get(contract_id)
        if contract is None:
            return Err(f"Policy contract {contract_id} not found")
        return Ok(contract)

    @beartype
    async def list_contracts(
        self,
        insurance_company_id: UUID,
        *,
        status: ContractStatus | None = None,
        member_id: UUID | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Result[tuple[list[PolicyContract], int], str]:
        where = (eq("insurance_company_id", insurance_company_id),)
        if status is not None:
            where += (eq("status", status),)
        if member_id is not None:
            where += (eq("member_id", member_id),)
        return Ok(
            await self._contracts.find_and_count(
                where, order_by=(desc("start_date"),), limit=limit, offset=offset
            )
        )

    @beartype
    async def update_status(
        self, contract_id: UUID, new_status: ContractStatus
    ) -> Result[PolicyContract, str]:
        contract = await self._contracts.get(contract_id)
        if contract is None:
            return Err(f"Policy contract {contract_id} not found")
        if not can_transition(contract.status, new_status):
            allowed = ", ".join(sorted(s.value for s in CONTRACT_TRANSITIONS[contract.status]))
            logger.warning(
                "Rejected contract %s transition %s -> %s",
                contract_id,
                contract.status.value,
                new_status.value,
            )
            return Err(
                f"Invalid status transition from {contract.status.value} to "
                f"{new_status.value}. Valid transitions are: {allowed or 'none'}"
            )

        updated = await self._contracts.update(contract_id, {"status": new_status})
        if updated is None:
            return Err(f"Policy contract {contract_id} not found")
        logger.info("Contract %s is now %s", contract_id, new_status.value)
        return Ok(updated)

    @beartype
    async def cancel(
        self, contract_id: UUID, cancellation: ContractCancellation
    ) -> Result[PolicyContract, str]:
        contract = await self._contracts.get(contract_id)
        if contract is None:
            return Err(f"Policy contract {contract_id} not found")
        if contract.status == ContractStatus.CANCELED:
            return Err(f"Invalid cancellation: contract {contract_id} is already canceled")
        if not can_transition(contract.status, ContractStatus.CANCELED):
            return Err(
                f"Invalid cancellation: a {contract.status.value} contract cannot be canceled"
            )

        updated = await self._contracts.update(
            contract_id,
            {
                "status": ContractStatus.CANCELED,
                "cancellation_reason": cancellation.reason,
                "cancellation_date": cancellation.effective_date or date.today(),
            },
        )
        if updated is None:
            return Err(f"Policy contract {contract_id} not found")
        logger.info("Canceled contract %s (%s)", contract_id, cancellation.reason.value)
        return Ok(updated)

    @beartype
    async def renew(self, contract_id: UUID) -> Result[PolicyContract, str]:
        """Open next year's contract and close this one as RENEWED."""
        contract = await self._contracts.get(contract_id)
        if contract is None:
            return Err(f"Policy contract {contract_id} not found")
        if contract.status != ContractStatus.ACTIVE:
            return Err("Invalid renewal: only ACTIVE contracts can be renewed")

        start = contract.end_date + timedelta(days=1)
        result = await self._insert_with_number(
            insurance_company_id=contract.insurance_company_id,
            member_id=contract.member_id,
            policy_type=contract.policy_type,
            premium=contract.premium,
            coverage_amount=contract.coverage_amount,
            start_date=start,
            end_date=one_year_after(start),
            status=ContractStatus.PENDING,
            previous_contract_id=contract.id,
        )
        if isinstance(result, Err):
            return result

        await self._contracts.update(contract_id, {"status": ContractStatus.RENEWED})
        logger.info(
            "Renewed contract %s as %s", contract.contract_number, result.value.contract_number
        )
        return result
