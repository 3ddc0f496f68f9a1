# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Policy product catalogue and quoting.

Products are created DRAFT, edited freely while DRAFT, and then activated
for sale. Only ACTIVE products valid on the quote date can be quoted.
"""

import logging
from datetime import date
from uuid import UUID, uuid4

from beartype import beartype
from pydantic import ValidationError

from ..core.result_types import Err, Ok, Result
from ..models.base import utc_now
from ..models.insurance_company import InsuranceCompany
from ..models.member import Member
from ..models.policy_product import (
    PRODUCT_TRANSITIONS,
    PolicyProduct,
    PolicyProductCreate,
    PolicyProductUpdate,
    PolicyType,
    ProductStatus,
)
from ..repositories.base import DuplicateRecordError, Repository
from ..repositories.filters import asc, eq, lte
from ..schemas.premium import PremiumQuote, PremiumQuoteRequest
from .premium_calculator import PremiumCalculator

logger = logging.getLogger(__name__)


class PolicyProductService:
    """Service for an insurer's product catalogue."""

    def __init__(
        self,
        products: Repository[PolicyProduct],
        companies: Repository[InsuranceCompany],
        members: Repository[Member],
    ) -> None:
        if not products or not hasattr(products, "insert"):
            raise ValueError("Policy product repository required")
        if not members or not hasattr(members, "get"):
            raise ValueError("Member repository required")
        self._products = products
        self._companies = companies
        self._members = members

    @beartype
    async def create(self, product_data: PolicyProductCreate) -> Result[PolicyProduct, str]:
        if await self._companies.get(product_data.insurance_company_id) is None:
            return Err(f"Insurance company {product_data.insurance_company_id} not found")

        now = utc_now()
        product = PolicyProduct(
            id=uuid4(),
            created_at=now,
            updated_at=now,
            status=ProductStatus.DRAFT,
            **product_data.model_dump(),
        )
        try:
            product = await self._products.insert(product)
        except DuplicateRecordError:
            return Err(f"Policy product with code {product_data.code} already exists")

        logger.info("Created policy product %s (%s)", product.code, product.id)
        return Ok(product)

    @beartype
    async def get(self, product_id: UUID) -> Result[PolicyProduct, str]:
        product = await self._products.get(product_id)
        if product is None:
            return Err(f"Policy product {product_id} not found")
        return Ok(product)

    @beartype
    async def list_products(
        self,
        insurance_company_id: UUID,
        *,
        status: ProductStatus | None = None,
        policy_type: PolicyType | None = None,
        available_on: date | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Result[tuple[list[PolicyProduct], int], str]:
        """Products of a company; ``available_on`` keeps those on sale that day."""
        where = (eq("insurance_company_id", insurance_company_id),)
        if status is not None:
            where += (eq("status", status),)
        if policy_type is not None:
            where += (eq("type", policy_type),)
        if available_on is None:
            return Ok(
                await self._products.find_and_count(
                    where, order_by=(asc("name"),), limit=limit, offset=offset
                )
            )

        # Open-ended products have no valid_to, so the upper bound is checked here
        where += (lte("valid_from", available_on),)
        rows = [
            p
            for p in await self._products.find(where, order_by=(asc("name"),))
            if p.valid_to is None or p.valid_to >= available_on
        ]
        return Ok((rows[offset : offset + limit], len(rows)))

    @beartype
    async def update(
        self, product_id: UUID, update_data: PolicyProductUpdate
    ) -> Result[PolicyProduct, str]:
        """Edit a DRAFT product."""
        product = await self._products.get(product_id)
        if product is None:
            return Err(f"Policy product {product_id} not found")
        if product.status != ProductStatus.DRAFT:
            return Err(
                f"Edit conflict: policy product {product.code} is "
                f"{product.status.value}; only DRAFT products can be edited"
            )

        try:
            updated = await self._products.update(
                product_id, update_data.model_dump(exclude_unset=True)
            )
        except ValidationError as e:
            return Err(f"Invalid policy product: {e.errors()[0]['msg']}")
        except DuplicateRecordError:
            return Err(f"Policy product with code {update_data.code} already exists")
        if updated is None:
            return Err(f"Policy product {product_id} not found")
        logger.info("Updated policy product %s", product_id)
        return Ok(updated)

    @beartype
    async def update_status(
        self, product_id: UUID, new_status: ProductStatus
    ) -> Result[PolicyProduct, str]:
        product = await self._products.get(product_id)
        if product is None:
            return Err(f"Policy product {product_id} not found")
        allowed = PRODUCT_TRANSITIONS[product.status]
        if new_status not in allowed:
            return Err(
                f"Invalid status transition from {product.status.value} to "
                f"{new_status.value}. Valid transitions are: "
                f"{', '.join(sorted(s.value for s in allowed))}"
            )
        if new_status == ProductStatus.ACTIVE:
            if not product.benefits:
                return Err("Invalid activation: a product needs at least one benefit")
            if product.base_premium <= 0:
                return Err("Invalid activation: base premium must be positive")

        updated = await self._products.update(product_id, {"status": new_status})
        if updated is None:
            return Err(f"Policy product {product_id} not found")
        logger.info("Policy product %s is now %s", product.code, new_status.value)
        return Ok(updated)

    @beartype
    async def quote(
        self, product_id: UUID, request: PremiumQuoteRequest
    ) -> Result[PremiumQuote, str]:
        """Price the policyholder and dependents under an ACTIVE product."""
        product = await self._products.get(product_id)
        if product is None:
            return Err(f"Policy product {product_id} not found")
        if product.status != ProductStatus.ACTIVE:
            return Err(
                f"Invalid quote: policy product {product.code} is {product.status.value}"
            )

        quote_date = request.quote_date or utc_now().date()
        if quote_date < product.valid_from or (
            product.valid_to is not None and quote_date > product.valid_to
        ):
            return Err(
                f"Invalid quote: policy product {product.code} is not on sale on {quote_date}"
            )

        member_ids = [request.member_id, *request.dependent_ids]
        if len(set(member_ids)) != len(member_ids):
            return Err("Invalid quote: a member may be listed only once")
        if product.max_members is not None and len(member_ids) > product.max_members:
            return Err(
                f"Invalid quote: policy product {product.code} covers at most "
                f"{product.max_members} members"
            )

        members: list[tuple[UUID, date]] = []
        for member_id in member_ids:
            member = await self._members.get(member_id)
            if member is None or member.insurance_company_id != product.insurance_company_id:
                return Err(f"Member {member_id} not found")
            members.append((member.id, member.date_of_birth.date()))

        result = PremiumCalculator.quote(
            product, members, quote_date, request.loadings, request.discounts
        )
        if isinstance(result, Ok):
            logger.info(
                "Quoted %s for %d member(s) on product %s",
                result.value.total_premium,
                len(members),
                product.code,
            )
        return result
