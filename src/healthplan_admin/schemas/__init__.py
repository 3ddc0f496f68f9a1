# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""API request/response schemas."""

from .analytics import (
    ClaimsAnalytics,
    DashboardSummary,
    FinancialSummary,
    MemberAnalytics,
    MonthlyRevenue,
    PolicyAnalytics,
    ProviderAnalytics,
)
from .auth import AdminUserPublic, CurrentUser, LoginRequest, TokenResponse
from .common import APIInfo, ListResponse
from .health import ComponentStatus, HealthResponse

__all__ = [
    "APIInfo",
    "AdminUserPublic",
    "ClaimsAnalytics",
    "ComponentStatus",
    "CurrentUser",
    "DashboardSummary",
    "FinancialSummary",
    "HealthResponse",
    "ListResponse",
    "LoginRequest",
    "MemberAnalytics",
    "MonthlyRevenue",
    "PolicyAnalytics",
    "ProviderAnalytics",
    "TokenResponse",
]
