"""Unit tests for reporting windows and rate arithmetic."""

from datetime import date, datetime, time, timezone
from decimal import Decimal

from healthplan_admin.core.result_types import Err, Ok
from healthplan_admin.services.analytics.period import (
    make_period,
    month_period,
    period_bounds,
    rate,
)


class TestMakePeriod:
    def test_single_day_window_is_valid(self) -> None:
        result = make_period(date(2025, 3, 1), date(2025, 3, 1))
        assert isinstance(result, Ok)
        assert result.value.start_date == result.value.end_date

    def test_inverted_range_is_invalid(self) -> None:
        result = make_period(date(2025, 3, 2), date(2025, 3, 1))
        assert isinstance(result, Err)
        assert result.error.startswith("Invalid date range")


class TestMonthPeriod:
    def test_leap_february(self) -> None:
        period = month_period(date(2024, 2, 10))
        assert period.start_date == date(2024, 2, 1)
        assert period.end_date == date(2024, 2, 29)

    def test_december(self) -> None:
        period = month_period(date(2025, 12, 31))
        assert (period.start_date, period.end_date) == (date(2025, 12, 1), date(2025, 12, 31))


def test_period_bounds_cover_whole_days() -> None:
    start, end = period_bounds(month_period(date(2025, 6, 15)))
    assert start == datetime(2025, 6, 1, tzinfo=timezone.utc)
    assert end == datetime.combine(date(2025, 6, 30), time.max, tzinfo=timezone.utc)


class TestRate:
    def test_zero_denominator_is_zero(self) -> None:
        assert rate(5, 0) == 0.0
        assert rate(Decimal("5"), Decimal("0")) == 0.0

    def test_percentage(self) -> None:
        assert rate(1, 4) == 25.0
        assert rate(-1, 4) == -25.0
        assert rate(Decimal("50"), Decimal("200")) == 25.0
