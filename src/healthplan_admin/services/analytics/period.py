# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Reporting windows and the arithmetic shared by the aggregators."""

import calendar
from datetime import date, datetime, time, timezone
from decimal import Decimal

from beartype import beartype

from ...core.result_types import Err, Ok, Result
from ...schemas.analytics import Period


@beartype
def make_period(start_date: date, end_date: date) -> Result[Period, str]:
    """Validate a closed window; an inverted range is rejected."""
    if end_date < start_date:
        return Err(
            f"Invalid date range: end date {end_date.isoformat()} "
            f"is before start date {start_date.isoformat()}"
        )
    return Ok(Period(start_date=start_date, end_date=end_date))


@beartype
def month_period(day: date) -> Period:
    """The calendar month containing ``day``."""
    last = calendar.monthrange(day.year, day.month)[1]
    return Period(
        start_date=day.replace(day=1),
        end_date=day.replace(day=last),
    )


@beartype
def period_bounds(period: Period) -> tuple[datetime, datetime]:
    """UTC instants spanning the whole first and last day of the window.

    Used for timestamp columns such as ``created_at``.
    """
    return (
        datetime.combine(period.start_date, time.min, tzinfo=timezone.utc),
        datetime.combine(period.end_date, time.max, tzinfo=timezone.utc),
    )


@beartype
def rate(numerator: int | Decimal, denominator: int | Decimal) -> float:
    """``numerator / denominator * 100``; zero when the denominator is zero."""
    if not denominator:
        return 0.0
    return float(Decimal(numerator) / Decimal(denominator) * 100)
