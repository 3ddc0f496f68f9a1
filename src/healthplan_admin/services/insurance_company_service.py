# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Insurance company business logic service."""

import logging
from uuid import UUID, uuid4

from beartype import beartype

from ..core.result_types import Err, Ok, Result
from ..models.base import utc_now
from ..models.insurance_company import (
    InsuranceCompany,
    InsuranceCompanyCreate,
    InsuranceCompanyUpdate,
)
from ..repositories.base import DuplicateRecordError, Repository
from ..repositories.filters import asc, eq

logger = logging.getLogger(__name__)


class InsuranceCompanyService:
    """Service for insurance company (tenant) management."""

    def __init__(self, companies: Repository[InsuranceCompany]) -> None:
        if not companies or not hasattr(companies, "insert"):
            raise ValueError("Insurance company repository required")
        self._companies = companies

    @beartype
    async def create(
        self, company_data: InsuranceCompanyCreate
    ) -> Result[InsuranceCompany, str]:
        """Register a company; name and code must be unique."""
        if await self._companies.exists((eq("name", company_data.name),)):
            return Err(f"Insurance company with name {company_data.name} already exists")
        if await self._companies.exists((eq("code", company_data.code),)):
            return Err(f"Insurance company with code {company_data.code} already exists")

        now = utc_now()
        company = InsuranceCompany(
            id=uuid4(), created_at=now, updated_at=now, **company_data.model_dump()
        )
        try:
            company = await self._companies.insert(company)
        except DuplicateRecordError:
            return Err("Insurance company already exists")

        logger.info("Created insurance company %s (%s)", company.id, company.code)
        return Ok(company)

    @beartype
    async def get(self, company_id: UUID) -> Result[InsuranceCompany, str]:
        company = await self._companies.get(company_id)
        if company is None:
            return Err(f"Insurance company {company_id} not found")
        return Ok(company)

    @beartype
    async def list_companies(
        self, *, active_only: bool = False, limit: int = 100, offset: int = 0
    ) -> Result[tuple[list[InsuranceCompany], int], str]:
        where = (eq("is_active", True),) if active_only else ()
        return Ok(
            await self._companies.find_and_count(
                where, order_by=(asc("name"),), limit=limit, offset=offset
            )
        )

    @beartype
    async def update(
        self, company_id: UUID, update_data: InsuranceCompanyUpdate
    ) -> Result[InsuranceCompany, str]:
        changes = update_data.model_dump(exclude_unset=True)
        if "name" in changes:
            existing = await self._companies.find_one((eq("name", changes["name"]),))
            if existing is not None and existing.id != company_id:
                return Err(f"Insurance company with name {changes['name']} already exists")

        try:
            company = await self._companies.update(company_id, changes)
        except DuplicateRecordError:
            return Err("Insurance company already exists")
        if company is None:
            return Err(f"Insurance company {company_id} not found")

        logger.info("Updated insurance company %s", company_id)
        return Ok(company)

    @beartype
    async def deactivate(self, company_id: UUID) -> Result[InsuranceCompany, str]:
        return await self.update(company_id, InsuranceCompanyUpdate(is_active=False))
