# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""API response patterns following Result[T,E] + HTTP semantics."""

from typing import Any, TypeVar

from beartype import beartype
from fastapi import Response
from pydantic import BaseModel, ConfigDict, Field

from ..core.result_types import Result
from ..schemas.common import ListResponse

T = TypeVar("T")

_STATUS_PHRASES: tuple[tuple[int, tuple[str, ...]], ...] = (
    (404, ("not found", "does not exist", "missing")),
    (401, ("unauthorized", "not authorized", "access denied")),
    (403, ("forbidden", "insufficient permissions", "not allowed")),
    (400, ("validation", "invalid", "malformed", "bad request", "required field")),
    (409, ("already exists", "conflict", "duplicate", "concurrent modification")),
    (429, ("rate limit", "too many requests", "throttled")),
)


@beartype
class ErrorResponse(BaseModel):
    """Standardized error response for business logic failures."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
        validate_default=True,
    )

    success: bool = Field(default=False, description="Always false for error responses")
    error: str = Field(..., description="Human-readable error message")
    error_code: str | None = Field(default=None, description="Machine-readable error code")
    details: dict[str, Any] | None = Field(
        default=None, description="Additional error context"
    )


@beartype
def map_error_to_status(error: str) -> int:
    """Map a business error message to an HTTP status code.

    Phrases are checked in order, so "Invalid ... not found" is a 404.
    Anything unrecognised is a 422.
    """
    error_lower = error.lower()
    for status_code, phrases in _STATUS_PHRASES:
        if any(phrase in error_lower for phrase in phrases):
            return status_code
    return 422


@beartype
def error_code_for(status_code: int) -> str:
    return {
        400: "INVALID_REQUEST",
        401: "UNAUTHORIZED",
        403: "FORBIDDEN",
        404: "NOT_FOUND",
        409: "CONFLICT",
        429: "RATE_LIMITED",
    }.get(status_code, "BUSINESS_RULE_VIOLATION")


@beartype
def handle_result(
    result: Result[T, str],
    response: Response,
    success_status: int = 200,
) -> T | ErrorResponse:
    """Unwrap a service Result, setting the response status code.

    Args:
        result: Service layer Result
        response: FastAPI Response object to set status code
        success_status: HTTP status for successful operations (default 200)

    Returns:
        Either the unwrapped success value or ErrorResponse
    """
    if result.is_err():
        error_msg = result.unwrap_err()
        response.status_code = map_error_to_status(error_msg)
        return ErrorResponse(
            error=error_msg, error_code=error_code_for(response.status_code)
        )

    response.status_code = success_status
    return result.unwrap()


@beartype
def paginated(
    result: Result[tuple[list[Any], int], str],
    item_type: type[Any],
    skip: int,
    limit: int,
) -> Result[ListResponse[Any], str]:
    """Wrap a service ``(items, total)`` page into a ListResponse."""
    return result.map(
        lambda page: ListResponse[item_type](  # type: ignore[valid-type]
            items=page[0], total=page[1], skip=skip, limit=limit
        )
    )
