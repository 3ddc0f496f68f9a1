# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Member (insured person) models."""

from datetime import date, datetime
from uuid import UUID

from beartype import beartype
from pydantic import EmailStr, Field, field_validator

from .base import BaseModelConfig, IdentifiableModel


@beartype
class MemberBase(BaseModelConfig):
    """Personal attributes of an insured person."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    # Stored as a timestamp; demographics measure age from it.
    date_of_birth: datetime
    # Free text. Demographics only count the exact values "Male" and "Female".
    gender: str | None = Field(default=None, max_length=50)
    national_id: str | None = Field(default=None, max_length=50)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=30)
    address: str | None = Field(default=None, max_length=500)
    employer_id: UUID | None = Field(
        default=None, description="Corporate client employing the member"
    )


@beartype
class Member(MemberBase, IdentifiableModel):
    """Persisted member of one insurance company."""

    insurance_company_id: UUID
    is_active: bool = True


@beartype
class MemberCreate(MemberBase):
    """Payload for enrolling a member."""

    insurance_company_id: UUID

    @field_validator("date_of_birth")
    @classmethod
    @beartype
    def validate_date_of_birth(cls, v: datetime) -> datetime:
        """Birth dates cannot lie in the future."""
        if v.date() > date.today():
            raise ValueError("Date of birth cannot be in the future")
        return v


@beartype
class MemberUpdate(BaseModelConfig):
    """Partial update of a member."""

    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    gender: str | None = Field(default=None, max_length=50)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=30)
    address: str | None = Field(default=None, max_length=500)
    employer_id: UUID | None = None
    is_active: bool | None = None
