# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""FastAPI API layer for HealthPlan Admin.

This package provides the RESTful endpoints for analytics and for the
administration of companies, members, providers, contracts, claims and
billing.
"""

__all__: list[str] = []
