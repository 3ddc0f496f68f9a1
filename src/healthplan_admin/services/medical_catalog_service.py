# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Medical catalog service.

Categories, services and items share the same shape of operations: codes
are unique within an insurance company, services and items hang off a
category of the same company.
"""

import logging
from typing import Any, TypeVar
from uuid import UUID, uuid4

from beartype import beartype
from pydantic import BaseModel

from ..core.result_types import Err, Ok, Result
from ..models.base import utc_now
from ..models.medical_catalog import (
    MedicalCategory,
    MedicalCategoryCreate,
    MedicalCategoryUpdate,
    MedicalItem,
    MedicalItemCreate,
    MedicalItemUpdate,
    MedicalService,
    MedicalServiceCreate,
    MedicalServiceUpdate,
)
from ..repositories.base import DuplicateRecordError, Repository
from ..repositories.filters import asc, eq

logger = logging.getLogger(__name__)

EntryT = TypeVar("EntryT", MedicalCategory, MedicalService, MedicalItem)


class MedicalCatalogService:
    """Service for a company's catalog of billable services and items."""

    def __init__(
        self,
        categories: Repository[MedicalCategory],
        services: Repository[MedicalService],
        items: Repository[MedicalItem],
    ) -> None:
        if not categories or not hasattr(categories, "insert"):
            raise ValueError("Medical category repository required")
        if not services or not hasattr(services, "insert"):
            raise ValueError("Medical service repository required")
        if not items or not hasattr(items, "insert"):
            raise ValueError("Medical item repository required")
        self._categories = categories
        self._services = services
        self._items = items

    async def _check_category(
        self, category_id: UUID, insurance_company_id: UUID
    ) -> Result[MedicalCategory, str]:
        category = await self._categories.get(category_id)
        if category is None or category.insurance_company_id != insurance_company_id:
            return Err(f"Medical category {category_id} not found")
        return Ok(category)

    async def _create(
        self,
        repo: Repository[EntryT],
        label: str,
        payload: BaseModel,
    ) -> Result[EntryT, str]:
        data = payload.model_dump()
        if await repo.exists(
            (
                eq("insurance_company_id", data["insurance_company_id"]),
                eq("code", data["code"]),
            )
        ):
            return Err(f"{label} with code {data['code']} already exists")

        now = utc_now()
        entry = repo.model(id=uuid4(), created_at=now, updated_at=now, **data)
        try:
            entry = await repo.insert(entry)
        except DuplicateRecordError:
            return Err(f"{label} with code {data['code']} already exists")
        logger.info(
            "Added %s %s to catalog of %s",
            label.lower(),
            entry.code,
            entry.insurance_company_id,
        )
        return Ok(entry)

    async def _get(
        self, repo: Repository[EntryT], label: str, entry_id: UUID
    ) -> Result[EntryT, str]:
        entry = await repo.get(entry_id)
        if entry is None:
            return Err(f"{label} {entry_id} not found")
        return Ok(entry)

    async def _list(
        self,
        repo: Repository[EntryT],
        insurance_company_id: UUID,
        *,
        category_id: UUID | None,
        active_only: bool,
        limit: int,
        offset: int,
    ) -> Result[tuple[list[EntryT], int], str]:
        where = (eq("insurance_company_id", insurance_company_id),)
        if category_id is not None:
            where += (eq("category_id", category_id),)
        if active_only:
            where += (eq("is_active", True),)
        return Ok(
            await repo.find_and_count(
                where, order_by=(asc("code"),), limit=limit, offset=offset
            )
        )

    async def _update(
        self, repo: Repository[EntryT], label: str, entry_id: UUID, changes: dict[str, Any]
    ) -> Result[EntryT, str]:
        entry = await repo.update(entry_id, changes)
        if entry is None:
            return Err(f"{label} {entry_id} not found")
        logger.info("Updated %s %s", label.lower(), entry.code)
        return Ok(entry)

    # Categories

    @beartype
    async def create_category(
        self, category_data: MedicalCategoryCreate
    ) -> Result[MedicalCategory, str]:
        if category_data.parent_category_id is not None:
            parent = await self._check_category(
                category_data.parent_category_id, category_data.insurance_company_id
            )
            if isinstance(parent, Err):
                return parent
        return await self._create(self._categories, "Medical category", category_data)

    @beartype
    async def get_category(self, category_id: UUID) -> Result[MedicalCategory, str]:
        return await self._get(self._categories, "Medical category", category_id)

    @beartype
    async def list_categories(
        self,
        insurance_company_id: UUID,
        *,
        active_only: bool = False,
        limit: int = 100,
        offset: int = 0,
    ) -> Result[tuple[list[MedicalCategory], int], str]:
        return await self._list(
            self._categories,
            insurance_company_id,
            category_id=None,
            active_only=active_only,
            limit=limit,
            offset=offset,
        )

    @beartype
    async def update_category(
        self, category_id: UUID, update_data: MedicalCategoryUpdate
    ) -> Result[MedicalCategory, str]:
        return await self._update(
            self._categories,
            "Medical category",
            category_id,
            update_data.model_dump(exclude_unset=True),
        )

    # Services

    @beartype
    async def create_service(
        self, service_data: MedicalServiceCreate
    ) -> Result[MedicalService, str]:
        category = await self._check_category(
            service_data.category_id, service_data.insurance_company_id
        )
        if isinstance(category, Err):
            return category
        return await self._create(self._services, "Medical service", service_data)

    @beartype
    async def get_service(self, service_id: UUID) -> Result[MedicalService, str]:
        return await self._get(self._services, "Medical service", service_id)

    @beartype
    async def list_services(
        self,
        insurance_company_id: UUID,
        *,
        category_id: UUID | None = None,
        active_only: bool = False,
        limit: int = 100,
        offset: int = 0,
    ) -> Result[tuple[list[MedicalService], int], str]:
        return await self._list(
            self._services,
            insurance_company_id,
            category_id=category_id,
            active_only=active_only,
            limit=limit,
            offset=offset,
        )

    @beartype
    async def update_service(
        self, service_id: UUID, update_data: MedicalServiceUpdate
    ) -> Result[MedicalService, str]:
        return await self._update(
            self._services,
            "Medical service",
            service_id,
            update_data.model_dump(exclude_unset=True),
        )

    # Items

    @beartype
    async def create_item(self, item_data: MedicalItemCreate) -> Result[MedicalItem, str]:
        category = await self._check_category(
            item_data.category_id, item_data.insurance_company_id
        )
        if isinstance(category, Err):
            return category
        return await self._create(self._items, "Medical item", item_data)

    @beartype
    async def get_item(self, item_id: UUID) -> Result[MedicalItem, str]:
        return await self._get(self._items, "Medical item", item_id)

    @beartype
    async def list_items(
        self,
        insurance_company_id: UUID,
        *,
        category_id: UUID | None = None,
        active_only: bool = False,
        limit: int = 100,
        offset: int = 0,
    ) -> Result[tuple[list[MedicalItem], int], str]:
        return await self._list(
            self._items,
            insurance_company_id,
            category_id=category_id,
            active_only=active_only,
            limit=limit,
            offset=offset,
        )

    @beartype
    async def update_item(
        self, item_id: UUID, update_data: MedicalItemUpdate
    ) -> Result[MedicalItem, str]:
        return await self._update(
            self._items,
            "Medical item",
            item_id,
            update_data.model_dump(exclude_unset=True),
        )
