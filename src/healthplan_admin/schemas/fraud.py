# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Fraud alert statistics."""

from beartype import beartype
from pydantic import Field

from ..models.base import BaseModelConfig


@beartype
class FraudStatistics(BaseModelConfig):
    """Alert counts for one company; rates are percentages."""

    total_alerts: int = Field(..., ge=0)
    by_status: dict[str, int]
    by_severity: dict[str, int]
    by_rule_type: dict[str, int]
    confirmed_fraud_rate: float = Field(..., ge=0, le=100)
    false_positive_rate: float = Field(..., ge=0, le=100)
    average_confidence: float = Field(..., ge=0, le=100)
