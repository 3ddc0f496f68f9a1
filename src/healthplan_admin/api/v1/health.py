# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Health check endpoints for monitoring system status."""

import logging
import time
from typing import Annotated

from beartype import beartype
from fastapi import APIRouter, Depends, Response, status

from ... import __version__
from ...core.config import Settings, get_settings
from ...core.database import get_database
from ...models.base import utc_now
from ...schemas.health import ComponentStatus, HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health/live")
@beartype
async def liveness_check() -> ComponentStatus:
    """Liveness probe: the process is serving requests."""
    return ComponentStatus(
        status="healthy", latency_ms=0.0, message="Application is running"
    )


@router.get("/health")
@beartype
async def health_check(
    response: Response,
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """Readiness check, including a database round trip on PostgreSQL storage."""
    database_status = None
    overall = "healthy"

    if settings.storage_backend == "postgres":
        db = get_database()
        started = time.perf_counter()
        try:
            await db.fetchval("SELECT 1")
            database_status = ComponentStatus(
                status="healthy",
                latency_ms=(time.perf_counter() - started) * 1000,
                message="Database reachable",
            )
        except Exception as e:
            logger.error("Database health check failed: %s", e)
            overall = "unhealthy"
            database_status = ComponentStatus(
                status="unhealthy",
                latency_ms=(time.perf_counter() - started) * 1000,
                message=type(e).__name__,
            )
            response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status=overall,
        timestamp=utc_now(),
        version=__version__,
        environment=settings.api_env,
        storage_backend=settings.storage_backend,
        database=database_status,
    )
