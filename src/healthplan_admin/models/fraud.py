# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Fraud detection models: configurable rules and the alerts they raise.

A rule's ``configuration`` is stored as JSON; its shape depends on the
rule type and is checked against the matching ``*Config`` model whenever a
rule is built.
"""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from beartype import beartype
from pydantic import Field, model_validator

from .base import BaseModelConfig, IdentifiableModel


class RuleType(str, Enum):
    """What a rule looks for."""

    FREQUENCY = "FREQUENCY"
    COMPATIBILITY = "COMPATIBILITY"
    UPCODING = "UPCODING"
    DUPLICATE = "DUPLICATE"


class RuleSeverity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class RuleStatus(str, Enum):
    """Only ACTIVE rules raise alerts; TESTING rules are evaluated and logged."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    TESTING = "TESTING"


class AlertStatus(str, Enum):
    NEW = "NEW"
    UNDER_REVIEW = "UNDER_REVIEW"
    CONFIRMED_FRAUD = "CONFIRMED_FRAUD"
    FALSE_POSITIVE = "FALSE_POSITIVE"
    RESOLVED = "RESOLVED"


class AlertResolution(str, Enum):
    """Action taken on a reviewed alert."""

    NONE = "NONE"
    CLAIM_DENIED = "CLAIM_DENIED"
    CLAIM_ADJUSTED = "CLAIM_ADJUSTED"
    PROVIDER_WARNED = "PROVIDER_WARNED"
    PROVIDER_SUSPENDED = "PROVIDER_SUSPENDED"
    MEMBER_WARNED = "MEMBER_WARNED"
    MEMBER_TERMINATED = "MEMBER_TERMINATED"
    REFERRED_TO_AUTHORITIES = "REFERRED_TO_AUTHORITIES"
    OTHER = "OTHER"


SEVERITY_RANK: dict[RuleSeverity, int] = {
    RuleSeverity.CRITICAL: 0,
    RuleSeverity.HIGH: 1,
    RuleSeverity.MEDIUM: 2,
    RuleSeverity.LOW: 3,
}


@beartype
class FrequencyConfig(BaseModelConfig):
    """More than ``max_occurrences`` of the codes within ``timeframe_days``."""

    timeframe_days: int = Field(default=30, ge=1, le=3650)
    max_occurrences: int = Field(default=1, ge=1)
    procedure_codes: list[str] = Field(..., min_length=1)


@beartype
class CompatibilityConfig(BaseModelConfig):
    """Code pairs that should not be billed for one member on the same day."""

    incompatible_codes: list[tuple[str, str]] = Field(..., min_length=1)


@beartype
class UpcodingPattern(BaseModelConfig):
    lower_code: str = Field(..., min_length=1)
    higher_code: str = Field(..., min_length=1)
    # Empty means every provider
    specialties: list[str] = Field(default_factory=list)
    threshold: float = Field(..., gt=0, le=1)


@beartype
class UpcodingConfig(BaseModelConfig):
    """Providers billing the higher code of a pair above ``threshold``."""

    upcoding_patterns: list[UpcodingPattern] = Field(..., min_length=1)
    min_claims: int = Field(
        default=5, ge=1, description="Provider history needed before a ratio is judged"
    )


@beartype
class DuplicateConfig(BaseModelConfig):
    """Same member, provider and code billed within ``window_days``."""

    window_days: int = Field(default=0, ge=0, le=365)


RULE_CONFIGS: dict[RuleType, type[BaseModelConfig]] = {
    RuleType.FREQUENCY: FrequencyConfig,
    RuleType.COMPATIBILITY: CompatibilityConfig,
    RuleType.UPCODING: UpcodingConfig,
    RuleType.DUPLICATE: DuplicateConfig,
}


@beartype
class FraudRuleBase(BaseModelConfig):
    code: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=2000)
    type: RuleType
    severity: RuleSeverity = RuleSeverity.MEDIUM
    status: RuleStatus = RuleStatus.ACTIVE
    configuration: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    @beartype
    def validate_configuration(self) -> "FraudRuleBase":
        """The configuration must parse as the rule type's config model."""
        RULE_CONFIGS[self.type].model_validate(self.configuration)
        return self

    def parsed_config(self) -> Any:
        """Typed view of ``configuration``."""
        return RULE_CONFIGS[self.type].model_validate(self.configuration)


@beartype
class FraudRuleCreate(FraudRuleBase):
    """Payload for adding a rule.

    A rule without a company is system-wide and applies to every insurer.
    """

    insurance_company_id: UUID | None = None


@beartype
class FraudRule(FraudRuleCreate, IdentifiableModel):
    """Persisted rule."""

    @property
    def is_system_wide(self) -> bool:
        return self.insurance_company_id is None


@beartype
class FraudRuleUpdate(BaseModelConfig):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, min_length=1, max_length=2000)
    severity: RuleSeverity | None = None
    status: RuleStatus | None = None
    configuration: dict[str, Any] | None = None


@beartype
class ClaimFraudAlert(IdentifiableModel):
    """A rule violation found on a claim; one per claim and rule."""

    claim_id: UUID
    rule_id: UUID
    rule_type: RuleType
    insurance_company_id: UUID
    severity: RuleSeverity
    status: AlertStatus = AlertStatus.NEW
    resolution: AlertResolution = AlertResolution.NONE
    explanation: str
    confidence_score: int = Field(..., ge=0, le=100)
    additional_data: dict[str, Any] = Field(default_factory=dict)
    reviewed_by_user_id: UUID | None = None
    reviewed_at: datetime | None = None
    review_notes: str | None = None


@beartype
class AlertStatusUpdate(BaseModelConfig):
    """Reviewer's decision on an alert."""

    status: AlertStatus
    resolution: AlertResolution | None = None
    review_notes: str | None = Field(default=None, max_length=2000)

    @model_validator(mode="after")
    @beartype
    def validate_decision(self) -> "AlertStatusUpdate":
        if self.status == AlertStatus.NEW:
            raise ValueError("An alert cannot be moved back to NEW")
        if (
            self.status in (AlertStatus.CONFIRMED_FRAUD, AlertStatus.RESOLVED)
            and self.resolution in (None, AlertResolution.NONE)
        ):
            raise ValueError(f"{self.status.value} requires a resolution")
        return self
