# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Provider network service."""

import logging
from uuid import UUID, uuid4

from beartype import beartype

from ..core.result_types import Err, Ok, Result
from ..models.base import utc_now
from ..models.insurance_company import InsuranceCompany
from ..models.provider import Provider, ProviderCreate
from ..repositories.base import DuplicateRecordError, Repository
from ..repositories.filters import asc, eq

logger = logging.getLogger(__name__)


class ProviderService:
    """Service for a company's provider network."""

    def __init__(
        self,
        providers: Repository[Provider],
        companies: Repository[InsuranceCompany],
    ) -> None:
        if not providers or not hasattr(providers, "insert"):
            raise ValueError("Provider repository required")
        self._providers = providers
        self._companies = companies

    @beartype
    async def create(self, provider_data: ProviderCreate) -> Result[Provider, str]:
        """Register a provider; license numbers are unique per company."""
        if await self._companies.get(provider_data.insurance_company_id) is None:
            return Err(f"Insurance company {provider_data.insurance_company_id} not found")
        if await self._providers.exists(
            (
                eq("insurance_company_id", provider_data.insurance_company_id),
                eq("license_number", provider_data.license_number),
            )
        ):
            return Err(
                f"Provider with license {provider_data.license_number} already exists"
            )

        now = utc_now()
        provider = Provider(
            id=uuid4(), created_at=now, updated_at=now, **provider_data.model_dump()
        )
        try:
            provider = await self._providers.insert(provider)
        except DuplicateRecordError:
            return Err(
                f"Provider with license {provider_data.license_number} already exists"
            )

        logger.info("Registered provider %s (%s)", provider.id, provider.name)
        return Ok(provider)

    @beartype
    async def get(self, provider_id: UUID) -> Result[Provider, str]:
        provider = await self._providers.get(provider_id)
        if provider is None:
            return Err(f"Provider {provider_id} not found")
        return Ok(provider)

    @beartype
    async def list_providers(
        self,
        insurance_company_id: UUID,
        *,
        active_only: bool = False,
        limit: int = 100,
        offset: int = 0,
    ) -> Result[tuple[list[Provider], int], str]:
        where = (eq("insurance_company_id", insurance_company_id),)
        if active_only:
            where += (eq("is_active", True),)
        return Ok(
            await self._providers.find_and_count(
                where, order_by=(asc("name"),), limit=limit, offset=offset
            )
        )

    @beartype
    async def set_active(self, provider_id: UUID, is_active: bool) -> Result[Provider, str]:
        provider = await self._providers.update(provider_id, {"is_active": is_active})
        if provider is None:
            return Err(f"Provider {provider_id} not found")
        logger.info(
            "Provider %s %s", provider_id, "activated" if is_active else "deactivated"
        )
        return Ok(provider)
