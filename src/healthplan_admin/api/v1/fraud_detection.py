# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Fraud detection endpoints: rules, claim analysis and alert review."""

from datetime import date
from typing import Annotated
from uuid import UUID

from beartype import beartype
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from ...core.result_types import Err, Ok, Result
from ...models.fraud import (
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
from ...schemas.auth import CurrentUser
from ...schemas.common import ListResponse
from ...schemas.fraud import FraudStatistics
from ...services.fraud_detection_service import FraudDetectionService
from ..dependencies import (
    CompanyStaffDep,
    Pagination,
    ensure_company_access,
    get_fraud_detection_service,
    owned_by_company,
)
from ..response_patterns import ErrorResponse, handle_result, paginated

router = APIRouter()

FraudServiceDep = Annotated[FraudDetectionService, Depends(get_fraud_detection_service)]
CompanyId = Annotated[UUID, Query(alias="insuranceCompanyId")]


@beartype
def ensure_rule_scope(user: CurrentUser, insurance_company_id: UUID | None) -> None:
    """System-wide rules are managed by ADMIN only.

    Raises:
        HTTPException: 403 for a non-ADMIN touching a system-wide rule
    """
    if insurance_company_id is not None:
        ensure_company_access(user, insurance_company_id)
    elif not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="System-wide fraud rules are not allowed for this role",
        )


async def _editable_rule(
    service: FraudDetectionService, user: CurrentUser, rule_id: UUID
) -> Result[FraudRule, str]:
    result = await service.get_rule(rule_id)
    if isinstance(result, Ok):
        ensure_rule_scope(user, result.value.insurance_company_id)
    return result


# Rules


@router.post("/rules", status_code=status.HTTP_201_CREATED)
@beartype
async def create_rule(
    rule_data: FraudRuleCreate,
    response: Response,
    service: FraudServiceDep,
    current_user: CompanyStaffDep,
) -> FraudRule | ErrorResponse:
    """Add a company rule, or a system-wide one when no company is given."""
    ensure_rule_scope(current_user, rule_data.insurance_company_id)
    result = await service.create_rule(rule_data)
    return handle_result(result, response, status.HTTP_201_CREATED)


@router.get("/rules")
@beartype
async def list_rules(
    response: Response,
    insurance_company_id: CompanyId,
    pagination: Pagination,
    service: FraudServiceDep,
    current_user: CompanyStaffDep,
    rule_status: Annotated[RuleStatus | None, Query(alias="status")] = None,
    rule_type: Annotated[RuleType | None, Query(alias="type")] = None,
) -> ListResponse[FraudRule] | ErrorResponse:
    """The company's rules and the system-wide ones, most severe first."""
    ensure_company_access(current_user, insurance_company_id)
    result = await service.list_rules(
        insurance_company_id,
        status=rule_status,
        rule_type=rule_type,
        limit=pagination.limit,
        offset=pagination.skip,
    )
    return handle_result(
        paginated(result, FraudRule, pagination.skip, pagination.limit), response
    )


@router.get("/rules/{rule_id}")
@beartype
async def get_rule(
    rule_id: UUID,
    response: Response,
    service: FraudServiceDep,
    current_user: CompanyStaffDep,
) -> FraudRule | ErrorResponse:
    result = await service.get_rule(rule_id)
    if isinstance(result, Ok) and result.value.insurance_company_id is not None:
        ensure_company_access(current_user, result.value.insurance_company_id)
    return handle_result(result, response)


@router.patch("/rules/{rule_id}")
@beartype
async def update_rule(
    rule_id: UUID,
    update_data: FraudRuleUpdate,
    response: Response,
    service: FraudServiceDep,
    current_user: CompanyStaffDep,
) -> FraudRule | ErrorResponse:
    existing = await _editable_rule(service, current_user, rule_id)
    if isinstance(existing, Err):
        return handle_result(existing, response)
    result = await service.update_rule(rule_id, update_data)
    return handle_result(result, response)


@router.post("/rules/{rule_id}/activate")
@beartype
async def activate_rule(
    rule_id: UUID,
    response: Response,
    service: FraudServiceDep,
    current_user: CompanyStaffDep,
) -> FraudRule | ErrorResponse:
    existing = await _editable_rule(service, current_user, rule_id)
    if isinstance(existing, Err):
        return handle_result(existing, response)
    result = await service.set_rule_status(rule_id, RuleStatus.ACTIVE)
    return handle_result(result, response)


@router.post("/rules/{rule_id}/deactivate")
@beartype
async def deactivate_rule(
    rule_id: UUID,
    response: Response,
    service: FraudServiceDep,
    current_user: CompanyStaffDep,
) -> FraudRule | ErrorResponse:
    existing = await _editable_rule(service, current_user, rule_id)
    if isinstance(existing, Err):
        return handle_result(existing, response)
    result = await service.set_rule_status(rule_id, RuleStatus.INACTIVE)
    return handle_result(result, response)


@router.delete("/rules/{rule_id}")
@beartype
async def delete_rule(
    rule_id: UUID,
    response: Response,
    service: FraudServiceDep,
    current_user: CompanyStaffDep,
) -> FraudRule | ErrorResponse:
    """Remove a rule that never raised an alert; returns the removed rule."""
    existing = await _editable_rule(service, current_user, rule_id)
    if isinstance(existing, Err):
        return handle_result(existing, response)
    result = await service.delete_rule(rule_id)
    return handle_result(result, response)


# Analysis and alerts


@router.post("/analyze/claims/{claim_id}")
@beartype
async def analyze_claim(
    claim_id: UUID,
    response: Response,
    insurance_company_id: CompanyId,
    service: FraudServiceDep,
    current_user: CompanyStaffDep,
) -> list[ClaimFraudAlert] | ErrorResponse:
    """Run the live rules on a claim; returns the alerts raised by this run."""
    ensure_company_access(current_user, insurance_company_id)
    result = await service.analyze_claim(claim_id, insurance_company_id)
    return handle_result(result, response)


@router.get("/alerts")
@beartype
async def list_alerts(
    response: Response,
    insurance_company_id: CompanyId,
    pagination: Pagination,
    service: FraudServiceDep,
    current_user: CompanyStaffDep,
    alert_status: Annotated[AlertStatus | None, Query(alias="status")] = None,
    severities: Annotated[list[RuleSeverity] | None, Query(alias="severity")] = None,
    claim_id: Annotated[UUID | None, Query(alias="claimId")] = None,
    start_date: Annotated[date | None, Query(alias="startDate")] = None,
    end_date: Annotated[date | None, Query(alias="endDate")] = None,
) -> ListResponse[ClaimFraudAlert] | ErrorResponse:
    ensure_company_access(current_user, insurance_company_id)
    result = await service.list_alerts(
        insurance_company_id,
        status=alert_status,
        severities=severities,
        claim_id=claim_id,
        created_from=start_date,
        created_to=end_date,
        limit=pagination.limit,
        offset=pagination.skip,
    )
    return handle_result(
        paginated(result, ClaimFraudAlert, pagination.skip, pagination.limit), response
    )


@router.get("/alerts/{alert_id}")
@beartype
async def get_alert(
    alert_id: UUID,
    response: Response,
    service: FraudServiceDep,
    current_user: CompanyStaffDep,
) -> ClaimFraudAlert | ErrorResponse:
    result = owned_by_company(current_user, await service.get_alert(alert_id))
    return handle_result(result, response)


@router.patch("/alerts/{alert_id}/status")
@beartype
async def update_alert_status(
    alert_id: UUID,
    decision: AlertStatusUpdate,
    response: Response,
    service: FraudServiceDep,
    current_user: CompanyStaffDep,
) -> ClaimFraudAlert | ErrorResponse:
    """Record a review decision; the caller is recorded as reviewer."""
    existing = owned_by_company(current_user, await service.get_alert(alert_id))
    if isinstance(existing, Err):
        return handle_result(existing, response)
    result = await service.update_alert_status(alert_id, decision, current_user.user_id)
    return handle_result(result, response)


@router.get("/statistics")
@beartype
async def fraud_statistics(
    response: Response,
    insurance_company_id: CompanyId,
    service: FraudServiceDep,
    current_user: CompanyStaffDep,
) -> FraudStatistics | ErrorResponse:
    ensure_company_access(current_user, insurance_company_id)
    result = await service.statistics(insurance_company_id)
    return handle_result(result, response)
