# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Health check schemas."""

from datetime import datetime

from pydantic import Field

from ..models.base import BaseModelConfig


class ComponentStatus(BaseModelConfig):
    """Individual component health status."""

    status: str = Field(..., pattern=r"^(healthy|unhealthy|degraded)$")
    latency_ms: float = Field(..., ge=0, description="Response latency in milliseconds")
    message: str = Field(default="", description="Status message")


class HealthResponse(BaseModelConfig):
    """Overall system health response."""

    status: str = Field(..., pattern=r"^(healthy|unhealthy|degraded)$")
    timestamp: datetime = Field(..., description="Health check timestamp")
    version: str = Field(..., description="Application version")
    environment: str = Field(..., description="Environment name")
    storage_backend: str = Field(..., description="Configured repository backend")
    database: ComponentStatus | None = Field(
        default=None, description="Database health; absent for in-memory storage"
    )
