# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""API v1 router aggregation.

This module combines all v1 API routers into a single router
that can be mounted on the main FastAPI application.
"""

from fastapi import APIRouter

from .analytics import router as analytics_router
from .auth import router as auth_router
from .billing import invoices_router, payments_router
from .claims import router as claims_router
from .corporate import router as corporate_router
from .fraud_detection import router as fraud_detection_router
from .health import router as health_router
from .insurance_companies import router as insurance_companies_router
from .medical_catalog import router as medical_catalog_router
from .members import router as members_router
from .payment_plans import router as payment_plans_router
from .policy_contracts import router as policy_contracts_router
from .policy_products import router as policy_products_router
from .providers import router as providers_router

# Create main v1 router
router = APIRouter(prefix="/api/v1")

router.include_router(health_router, tags=["health"])
router.include_router(auth_router)
router.include_router(analytics_router)

# Administration
router.include_router(
    insurance_companies_router,
    prefix="/insurance-companies",
    tags=["insurance-companies"],
)
router.include_router(
    corporate_router, prefix="/corporate-clients", tags=["corporate-clients"]
)
router.include_router(members_router, prefix="/members", tags=["members"])
router.include_router(providers_router, prefix="/providers", tags=["providers"])
router.include_router(
    policy_products_router, prefix="/policy-products", tags=["policy-products"]
)
router.include_router(
    policy_contracts_router, prefix="/policy-contracts", tags=["policy-contracts"]
)
router.include_router(
    medical_catalog_router, prefix="/medical-catalog", tags=["medical-catalog"]
)
router.include_router(claims_router, prefix="/claims", tags=["claims"])
router.include_router(
    fraud_detection_router, prefix="/fraud-detection", tags=["fraud-detection"]
)
router.include_router(invoices_router, prefix="/invoices", tags=["billing"])
router.include_router(payments_router, prefix="/payments", tags=["billing"])
router.include_router(
    payment_plans_router, prefix="/payment-plans", tags=["billing"]
)


__all__ = ["router"]
