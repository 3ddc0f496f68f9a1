# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Common schemas used across the API."""

from typing import Generic, TypeVar

from pydantic import Field

from ..models.base import BaseModelConfig

T = TypeVar("T")


class ListResponse(BaseModelConfig, Generic[T]):
    """One page of a list endpoint."""

    items: list[T] = Field(..., description="Records on this page")
    total: int = Field(..., ge=0, description="Total number of matching records")
    skip: int = Field(..., ge=0, description="Number of items skipped")
    limit: int = Field(..., ge=1, description="Maximum items returned")


class APIInfo(BaseModelConfig):
    """API root information."""

    name: str = Field(..., description="API name")
    version: str = Field(..., description="API version")
    status: str = Field(..., description="API status")
    environment: str = Field(..., description="Deployment environment")
