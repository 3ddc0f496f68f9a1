# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Corporate client onboarding and coverage plan management."""

import logging
from uuid import UUID, uuid4

from beartype import beartype

from ..core.result_types import Err, Ok, Result
from ..models.admin import AdminUser, AdminUserCreate, UserType
from ..models.base import utc_now
from ..models.corporate import (
    CorporateClient,
    CorporateClientCreate,
    CorporateClientDetail,
    CorporateStatusUpdate,
    CoveragePlan,
    CoveragePlanUpdate,
)
from ..models.insurance_company import InsuranceCompany
from ..repositories.base import DuplicateRecordError, Repository
from ..repositories.filters import asc, eq
from .auth_service import AuthService

logger = logging.getLogger(__name__)


class CorporateService:
    """Service for corporate clients and their coverage plans."""

    def __init__(
        self,
        clients: Repository[CorporateClient],
        plans: Repository[CoveragePlan],
        companies: Repository[InsuranceCompany],
        users: Repository[AdminUser],
        auth: AuthService,
    ) -> None:
        if not clients or not hasattr(clients, "insert"):
            raise ValueError("Corporate client repository required")
        if not plans or not hasattr(plans, "insert"):
            raise ValueError("Coverage plan repository required")
        self._clients = clients
        self._plans = plans
        self._companies = companies
        self._users = users
        self._auth = auth

    @beartype
    async def create(
        self, client_data: CorporateClientCreate
    ) -> Result[CorporateClientDetail, str]:
        """Create the client, its coverage plans and its admin login.

        All uniqueness checks run before the first write. If a later write
        fails, either as an ``Err`` from the login or as an exception from a
        repository, the client and plans written so far are removed again.
        """
        if await self._companies.get(client_data.insurance_company_id) is None:
            return Err(f"Insurance company {client_data.insurance_company_id} not found")
        if await self._clients.exists((eq("name", client_data.name),)):
            return Err(f"Corporate client with name {client_data.name} already exists")
        if await self._clients.exists(
            (eq("registration_number", client_data.registration_number),)
        ):
            return Err(
                "Corporate client with registration number "
                f"{client_data.registration_number} already exists"
            )
        credentials = client_data.admin_credentials
        if await self._users.exists((eq("username", credentials.username),)):
            return Err(f"User {credentials.username} already exists")

        now = utc_now()
        client = CorporateClient(
            id=uuid4(),
            created_at=now,
            updated_at=now,
            **client_data.model_dump(exclude={"coverage_plans", "admin_credentials"}),
        )
        try:
            client = await self._clients.insert(client)
        except DuplicateRecordError:
            return Err("Corporate client already exists")

        plans: list[CoveragePlan] = []
        try:
            for plan_data in client_data.coverage_plans:
                plan = CoveragePlan(
                    id=uuid4(),
                    created_at=now,
                    updated_at=now,
                    corporate_client_id=client.id,
                    **plan_data.model_dump(),
                )
                plans.append(await self._plans.insert(plan))

            admin = await self._auth.create_user(
                AdminUserCreate(
                    username=credentials.username,
                    email=credentials.email,
                    password=credentials.password,
                    user_type=UserType.CORPORATE_ADMIN,
                    insurance_company_id=client.insurance_company_id,
                    corporate_client_id=client.id,
                )
            )
        except BaseException:
            logger.exception("Onboarding of corporate client %s failed", client.id)
            await self._discard(client, plans)
            raise

        if isinstance(admin, Err):
            await self._discard(client, plans)
            logger.warning("Rolled back corporate client %s: %s", client.id, admin.error)
            return admin

        logger.info(
            "Created corporate client %s with %d coverage plans", client.id, len(plans)
        )
        return Ok(CorporateClientDetail(client=client, coverage_plans=plans))

    async def _discard(self, client: CorporateClient, plans: list[CoveragePlan]) -> None:
        """Remove a partially onboarded client and the plans written for it."""
        for plan in plans:
            await self._plans.delete(plan.id)
        await self._clients.delete(client.id)

    @beartype
    async def get(self, client_id: UUID) -> Result[CorporateClientDetail, str]:
        client = await self._clients.get(client_id)
        if client is None:
            return Err(f"Corporate client {client_id} not found")
        plans = await self._plans.find(
            (eq("corporate_client_id", client_id),), order_by=(asc("service_type"),)
        )
        return Ok(CorporateClientDetail(client=client, coverage_plans=plans))

    @beartype
    async def list_clients(
        self, insurance_company_id: UUID, *, limit: int = 100, offset: int = 0
    ) -> Result[tuple[list[CorporateClient], int], str]:
        return Ok(
            await self._clients.find_and_count(
                (eq("insurance_company_id", insurance_company_id),),
                order_by=(asc("name"),),
                limit=limit,
                offset=offset,
            )
        )

    @beartype
    async def update_status(
        self, client_id: UUID, status_update: CorporateStatusUpdate
    ) -> Result[CorporateClient, str]:
        client = await self._clients.update(
            client_id, {"is_active": status_update.is_active}
        )
        if client is None:
            return Err(f"Corporate client {client_id} not found")
        logger.info(
            "Corporate client %s %s (%s)",
            client_id,
            "activated" if status_update.is_active else "deactivated",
            status_update.reason or "no reason given",
        )
        return Ok(client)

    @beartype
    async def update_coverage_plan(
        self, client_id: UUID, plan_id: UUID, plan_update: CoveragePlanUpdate
    ) -> Result[CoveragePlan, str]:
        plan = await self._plans.get(plan_id)
        if plan is None or plan.corporate_client_id != client_id:
            return Err(f"Coverage plan {plan_id} not found")
        try:
            updated = await self._plans.update(
                plan_id, plan_update.model_dump(exclude_unset=True)
            )
        except ValueError as e:
            # Merged terms failed model validation, e.g. CAPPED without a cap
            return Err(f"Invalid coverage plan: {e}")
        if updated is None:
            return Err(f"Coverage plan {plan_id} not found")
        return Ok(updated)
