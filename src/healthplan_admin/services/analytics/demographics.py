# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Age and gender breakdown of a company's actively covered members.

Age is the year component of ``epoch + (now - birth)`` minus 1970, in
absolute value. This is not a calendar-exact age: leap days between the
two instants are not corrected for, so a member can tip into the next year
a day or two around their birthday. Reports depend on this exact rule.
"""

import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Final
from uuid import UUID

from beartype import beartype

from ...models.member import Member
from ...models.policy_contract import ContractStatus, PolicyContract
from ...repositories.base import Repository
from ...repositories.filters import eq, in_
from ...schemas.analytics import DemographicBucket
from .period import rate

logger = logging.getLogger(__name__)

_EPOCH: Final = datetime(1970, 1, 1, tzinfo=timezone.utc)

# (label, inclusive upper bound); the last bucket is open-ended.
AGE_BUCKETS: Final[tuple[tuple[str, int | None], ...]] = (
    ("0-18", 18),
    ("19-35", 35),
    ("36-50", 50),
    ("51-65", 65),
    ("65+", None),
)
GENDER_BUCKETS: Final = ("Male", "Female", "Other")


@beartype
def age_in_years(date_of_birth: datetime, now: datetime) -> int:
    """Whole years between birth and ``now`` by the epoch-offset rule."""
    if date_of_birth.tzinfo is None:
        date_of_birth = date_of_birth.replace(tzinfo=timezone.utc)
    return abs((_EPOCH + (now - date_of_birth)).year - 1970)


@beartype
def age_bucket(age: int) -> str:
    for label, upper in AGE_BUCKETS:
        if upper is None or age <= upper:
            return label
    raise AssertionError("unreachable: last age bucket is open-ended")


@beartype
def gender_bucket(gender: str | None) -> str:
    """Exact ``Male``/``Female`` matches; everything else is ``Other``."""
    if gender in ("Male", "Female"):
        return gender
    return "Other"


@beartype
def bucket_members(members: list[Member], now: datetime) -> list[DemographicBucket]:
    """All five age rows followed by all three gender rows."""
    total = len(members)
    ages = Counter(age_bucket(age_in_years(m.date_of_birth, now)) for m in members)
    genders = Counter(gender_bucket(m.gender) for m in members)

    rows = [
        DemographicBucket(
            category="Age",
            value=label,
            count=ages[label],
            percentage=rate(ages[label], total),
        )
        for label, _ in AGE_BUCKETS
    ]
    rows.extend(
        DemographicBucket(
            category="Gender",
            value=label,
            count=genders[label],
            percentage=rate(genders[label], total),
        )
        for label in GENDER_BUCKETS
    )
    return rows


class DemographicsAggregator:
    """Demographics of members holding at least one ACTIVE contract."""

    def __init__(
        self,
        contracts: Repository[PolicyContract],
        members: Repository[Member],
    ) -> None:
        if not contracts or not hasattr(contracts, "distinct"):
            raise ValueError("Policy contract repository required")
        if not members or not hasattr(members, "find"):
            raise ValueError("Member repository required")
        self._contracts = contracts
        self._members = members

    @beartype
    async def demographics(
        self, insurance_company_id: UUID, now: datetime | None = None
    ) -> list[DemographicBucket]:
        member_ids = await self._contracts.distinct(
            "member_id",
            (
                eq("insurance_company_id", insurance_company_id),
                eq("status", ContractStatus.ACTIVE),
            ),
        )
        members = (
            await self._members.find((in_("id", member_ids),)) if member_ids else []
        )
        logger.debug(
            "Demographics for %s over %d active members",
            insurance_company_id,
            len(members),
        )
        return bucket_members(members, now or datetime.now(timezone.utc))
