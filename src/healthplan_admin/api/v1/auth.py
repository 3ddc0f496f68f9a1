# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Authentication endpoints: login, current user and account creation."""

from typing import Annotated

from beartype import beartype
from fastapi import APIRouter, Depends, Response, status

from ...core.result_types import Err, Ok
from ...models.admin import AdminUserCreate
from ...schemas.auth import AdminUserPublic, CurrentUser, LoginRequest, TokenResponse
from ...services.auth_service import AuthService
from ..dependencies import (
    AdminUserDep,
    get_auth_service,
    get_current_user,
)
from ..response_patterns import ErrorResponse, handle_result

router = APIRouter(prefix="/auth", tags=["authentication"])

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


@router.post("/login")
@beartype
async def login(
    request: LoginRequest,
    response: Response,
    service: AuthServiceDep,
) -> TokenResponse | ErrorResponse:
    """Exchange username and password for a bearer token."""
    result = await service.login(request.username, request.password)
    if isinstance(result, Ok):
        issued = result.value
        result = Ok(
            TokenResponse(access_token=issued.access_token, expires_in=issued.expires_in)
        )
    return handle_result(result, response)


@router.get("/me")
@beartype
async def me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Identity carried by the presented token."""
    return current_user


@router.post("/users")
@beartype
async def create_user(
    user_data: AdminUserCreate,
    response: Response,
    service: AuthServiceDep,
    _admin: AdminUserDep,
) -> AdminUserPublic | ErrorResponse:
    """Create a login account (platform ADMIN only)."""
    result = await service.create_user(user_data)
    if isinstance(result, Err):
        return handle_result(result, response)
    return handle_result(
        Ok(AdminUserPublic.from_user(result.value)),
        response,
        status.HTTP_201_CREATED,
    )
