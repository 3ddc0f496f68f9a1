# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Member business logic service."""

import logging
from uuid import UUID, uuid4

from beartype import beartype

from ..core.result_types import Err, Ok, Result
from ..models.base import utc_now
from ..models.insurance_company import InsuranceCompany
from ..models.member import Member, MemberCreate, MemberUpdate
from ..repositories.base import DuplicateRecordError, Repository
from ..repositories.filters import asc, eq

logger = logging.getLogger(__name__)


class MemberService:
    """Service for member enrollment data."""

    def __init__(
        self,
        members: Repository[Member],
        companies: Repository[InsuranceCompany],
    ) -> None:
        if not members or not hasattr(members, "insert"):
            raise ValueError("Member repository required")
        self._members = members
        self._companies = companies

    @beartype
    async def create(self, member_data: MemberCreate) -> Result[Member, str]:
        if await self._companies.get(member_data.insurance_company_id) is None:
            return Err(f"Insurance company {member_data.insurance_company_id} not found")

        now = utc_now()
        member = Member(
            id=uuid4(), created_at=now, updated_at=now, **member_data.model_dump()
        )
        try:
            member = await self._members.insert(member)
        except DuplicateRecordError:
            return Err(f"Member with national id {member_data.national_id} already exists")

        logger.info("Enrolled member %s in %s", member.id, member.insurance_company_id)
        return Ok(member)

    @beartype
    async def get(self, member_id: UUID) -> Result[Member, str]:
        member = await self._members.get(member_id)
        if member is None:
            return Err(f"Member {member_id} not found")
        return Ok(member)

    @beartype
    async def list_members(
        self, insurance_company_id: UUID, *, limit: int = 100, offset: int = 0
    ) -> Result[tuple[list[Member], int], str]:
        return Ok(
            await self._members.find_and_count(
                (eq("insurance_company_id", insurance_company_id),),
                order_by=(asc("last_name"), asc("first_name")),
                limit=limit,
                offset=offset,
            )
        )

    @beartype
    async def update(
        self, member_id: UUID, update_data: MemberUpdate
    ) -> Result[Member, str]:
        member = await self._members.update(
            member_id, update_data.model_dump(exclude_unset=True)
        )
        if member is None:
            return Err(f"Member {member_id} not found")
        logger.info("Updated member %s", member_id)
        return Ok(member)
