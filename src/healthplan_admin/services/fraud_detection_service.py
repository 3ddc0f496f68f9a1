# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Rule-based fraud detection on claims.

A company's rules are its own plus the system-wide ones. Analysing a claim
runs every ACTIVE and TESTING rule; ACTIVE violations become alerts for
review, TESTING violations are only logged. A claim raises at most one
alert per rule, so analysis can be repeated safely.
"""

import logging
from collections import Counter
from datetime import date, datetime, time, timezone
from uuid import UUID, uuid4

from beartype import beartype
from pydantic import ValidationError

from ..core.result_types import Err, Ok, Result
from ..models.base import utc_now
from ..models.claim import Claim
from ..models.fraud import (
    SEVERITY_RANK,
    AlertStatus,
    AlertStatusUpdate,
    ClaimFraudAlert,
    FraudRule,
    FraudRuleCreate,
    FraudRuleUpdate,
    RuleSeverity,
    RuleStatus,
    RuleType,
)
from ..models.insurance_company import InsuranceCompany
from ..repositories.base import DuplicateRecordError, Repository
from ..repositories.filters import desc, eq, gte, in_, is_null, lte
from ..schemas.fraud import FraudStatistics
from .analytics.period import rate
from .fraud_rules import RuleEvaluator

logger = logging.getLogger(__name__)

# Reviewed alerts that take no further status changes.
CLOSED_ALERT_STATUSES = frozenset({AlertStatus.RESOLVED, AlertStatus.FALSE_POSITIVE})


class FraudDetectionService:
    """Service for fraud rules, claim analysis and alert review."""

    def __init__(
        self,
        rules: Repository[FraudRule],
        alerts: Repository[ClaimFraudAlert],
        claims: Repository[Claim],
        companies: Repository[InsuranceCompany],
        evaluator: RuleEvaluator,
    ) -> None:
        if not rules or not hasattr(rules, "insert"):
            raise ValueError("Fraud rule repository required")
        if not alerts or not hasattr(alerts, "insert"):
            raise ValueError("Fraud alert repository required")
        self._rules = rules
        self._alerts = alerts
        self._claims = claims
        self._companies = companies
        self._evaluator = evaluator

    # Rules

    @beartype
    async def create_rule(self, rule_data: FraudRuleCreate) -> Result[FraudRule, str]:
        company_id = rule_data.insurance_company_id
        if company_id is not None and await self._companies.get(company_id) is None:
            return Err(f"Insurance company {company_id} not found")

        now = utc_now()
        rule = FraudRule(id=uuid4(), created_at=now, updated_at=now, **rule_data.model_dump())
        try:
            rule = await self._rules.insert(rule)
        except DuplicateRecordError:
            return Err(f"Fraud rule with code {rule_data.code} already exists")
        logger.info(
            "Created %s fraud rule %s (%s)",
            "system-wide" if rule.is_system_wide else "company",
            rule.code,
            rule.type.value,
        )
        return Ok(rule)

    @beartype
    async def get_rule(self, rule_id: UUID) -> Result[FraudRule, str]:
        rule = await self._rules.get(rule_id)
        if rule is None:
            return Err(f"Fraud rule {rule_id} not found")
        return Ok(rule)

    async def _applicable_rules(
        self,
        insurance_company_id: UUID,
        status: RuleStatus | None = None,
        rule_type: RuleType | None = None,
    ) -> list[FraudRule]:
        """Company and system-wide rules, most severe first."""
        extra = ()
        if status is not None:
            extra += (eq("status", status),)
        if rule_type is not None:
            extra += (eq("type", rule_type),)
        rules = await self._rules.find(
            (eq("insurance_company_id", insurance_company_id), *extra)
        ) + await self._rules.find((is_null("insurance_company_id"), *extra))
        return sorted(rules, key=lambda r: (SEVERITY_RANK[r.severity], r.code))

    @beartype
    async def list_rules(
        self,
        insurance_company_id: UUID,
        *,
        status: RuleStatus | None = None,
        rule_type: RuleType | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Result[tuple[list[FraudRule], int], str]:
        rules = await self._applicable_rules(insurance_company_id, status, rule_type)
        return Ok((rules[offset : offset + limit], len(rules)))

    @beartype
    async def update_rule(
        self, rule_id: UUID, update_data: FraudRuleUpdate
    ) -> Result[FraudRule, str]:
        try:
            rule = await self._rules.update(rule_id, update_data.model_dump(exclude_unset=True))
        except ValidationError as e:
            return Err(f"Invalid fraud rule: {e.errors()[0]['msg']}")
        if rule is None:
            return Err(f"Fraud rule {rule_id} not found")
        logger.info("Updated fraud rule %s", rule.code)
        return Ok(rule)

    @beartype
    async def set_rule_status(
        self, rule_id: UUID, status: RuleStatus
    ) -> Result[FraudRule, str]:
        return await self.update_rule(rule_id, FraudRuleUpdate(status=status))

    @beartype
    async def delete_rule(self, rule_id: UUID) -> Result[FraudRule, str]:
        """Remove a rule that has never raised an alert."""
        rule = await self._rules.get(rule_id)
        if rule is None:
            return Err(f"Fraud rule {rule_id} not found")
        if await self._alerts.exists((eq("rule_id", rule_id),)):
            return Err(
                f"Delete conflict: fraud rule {rule.code} has alerts; deactivate it instead"
            )
        if not await self._rules.delete(rule_id):
            return Err(f"Fraud rule {rule_id} not found")
        logger.info("Deleted fraud rule %s", rule.code)
        return Ok(rule)

    # Analysis

    @beartype
    async def analyze_claim(
        self, claim_id: UUID, insurance_company_id: UUID
    ) -> Result[list[ClaimFraudAlert], str]:
        """Run the company's live rules on a claim; returns the alerts raised now."""
        claim = await self._claims.get(claim_id)
        if claim is None or claim.insurance_company_id != insurance_company_id:
            return Err(f"Claim {claim_id} not found")

        rules = [
            r
            for r in await self._applicable_rules(insurance_company_id)
            if r.status in (RuleStatus.ACTIVE, RuleStatus.TESTING)
        ]
        raised: list[ClaimFraudAlert] = []
        for rule in rules:
            violation = await self._evaluator.evaluate(rule, claim)
            if violation is None:
                continue
            if rule.status == RuleStatus.TESTING:
                logger.info(
                    "Testing rule %s matched claim %s: %s",
                    rule.code,
                    claim.claim_number,
                    violation.explanation,
                )
                continue

            now = utc_now()
            alert = ClaimFraudAlert(
                id=uuid4(),
                created_at=now,
                updated_at=now,
                claim_id=claim.id,
                rule_id=rule.id,
                rule_type=rule.type,
                insurance_company_id=insurance_company_id,
                severity=rule.severity,
                explanation=violation.explanation,
                confidence_score=violation.confidence,
                additional_data=violation.data,
            )
            try:
                raised.append(await self._alerts.insert(alert))
            except DuplicateRecordError:
                # Already flagged by an earlier analysis
                continue
            logger.warning(
                "Fraud alert on claim %s: rule %s (%s, confidence %d)",
                claim.claim_number,
                rule.code,
                rule.severity.value,
                violation.confidence,
            )
        return Ok(raised)

    # Alerts

    @beartype
    async def get_alert(self, alert_id: UUID) -> Result[ClaimFraudAlert, str]:
        alert = await self._alerts.get(alert_id)
        if alert is None:
            return Err(f"Fraud alert {alert_id} not found")
        return Ok(alert)

    @beartype
    async def list_alerts(
        self,
        insurance_company_id: UUID,
        *,
        status: AlertStatus | None = None,
        severities: list[RuleSeverity] | None = None,
        claim_id: UUID | None = None,
        created_from: date | None = None,
        created_to: date | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Result[tuple[list[ClaimFraudAlert], int], str]:
        if created_from and created_to and created_to < created_from:
            return Err(
                f"Invalid date range: end date {created_to.isoformat()} "
                f"is before start date {created_from.isoformat()}"
            )
        where = (eq("insurance_company_id", insurance_company_id),)
        if status is not None:
            where += (eq("status", status),)
        if severities:
            where += (in_("severity", severities),)
        if claim_id is not None:
            where += (eq("claim_id", claim_id),)
        if created_from is not None:
            where += (
                gte("created_at", datetime.combine(created_from, time.min, tzinfo=timezone.utc)),
            )
        if created_to is not None:
            where += (
                lte("created_at", datetime.combine(created_to, time.max, tzinfo=timezone.utc)),
            )
        return Ok(
            await self._alerts.find_and_count(
                where, order_by=(desc("created_at"),), limit=limit, offset=offset
            )
        )

    @beartype
    async def update_alert_status(
        self, alert_id: UUID, decision: AlertStatusUpdate, reviewer_id: UUID
    ) -> Result[ClaimFraudAlert, str]:
        alert = await self._alerts.get(alert_id)
        if alert is None:
            return Err(f"Fraud alert {alert_id} not found")
        if alert.status in CLOSED_ALERT_STATUSES:
            return Err(f"Invalid status change: alert {alert_id} is {alert.status.value}")

        changes = decision.model_dump(exclude_unset=True)
        changes.update(reviewed_by_user_id=reviewer_id, reviewed_at=utc_now())
        updated = await self._alerts.update(alert_id, changes)
        if updated is None:
            return Err(f"Fraud alert {alert_id} not found")
        logger.info("Fraud alert %s is now %s", alert_id, decision.status.value)
        return Ok(updated)

    @beartype
    async def statistics(self, insurance_company_id: UUID) -> Result[FraudStatistics, str]:
        alerts = await self._alerts.find((eq("insurance_company_id", insurance_company_id),))
        by_status = Counter(a.status.value for a in alerts)
        total = len(alerts)
        return Ok(
            FraudStatistics(
                total_alerts=total,
                by_status={s.value: by_status[s.value] for s in AlertStatus},
                by_severity=dict(Counter(a.severity.value for a in alerts)),
                by_rule_type=dict(Counter(a.rule_type.value for a in alerts)),
                confirmed_fraud_rate=rate(by_status[AlertStatus.CONFIRMED_FRAUD.value], total),
                false_positive_rate=rate(by_status[AlertStatus.FALSE_POSITIVE.value], total),
                average_confidence=(
                    sum(a.confidence_score for a in alerts) / total if total else 0.0
                ),
            )
        )
