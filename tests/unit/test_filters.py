"""Unit tests for repository query conditions."""

from datetime import date

import pytest

from healthplan_admin.models.policy_contract import ContractStatus
from healthplan_admin.repositories.filters import (
    Condition,
    between,
    desc,
    eq,
    gte,
    in_,
    is_null,
    lt,
    lte,
    matches,
    ne,
    plain,
)


class TestConditionBuilders:
    """Test the helper constructors."""

    def test_enum_values_are_stored_plain(self) -> None:
        """Enums are unwrapped so both backends compare raw values."""
        condition = eq("status", ContractStatus.ACTIVE)
        assert condition.value == "ACTIVE"
        assert in_("status", [ContractStatus.ACTIVE, ContractStatus.RENEWED]).value == (
            "ACTIVE",
            "RENEWED",
        )

    def test_plain_leaves_other_values(self) -> None:
        assert plain(5) == 5
        assert plain(None) is None

    def test_desc_order(self) -> None:
        order = desc("start_date")
        assert order.name == "start_date"
        assert order.descending is True


class TestMatches:
    """Test in-Python evaluation of conditions."""

    def test_between_is_closed_on_both_ends(self) -> None:
        window = between("start_date", date(2025, 1, 1), date(2025, 1, 31))
        assert matches(date(2025, 1, 1), window)
        assert matches(date(2025, 1, 31), window)
        assert not matches(date(2024, 12, 31), window)
        assert not matches(date(2025, 2, 1), window)

    def test_null_never_matches_comparisons(self) -> None:
        for condition in (eq("x", 1), ne("x", 1), lt("x", 1), gte("x", 1), in_("x", [1])):
            assert not matches(None, condition)

    def test_in_with_empty_collection_matches_nothing(self) -> None:
        assert not matches("ACTIVE", in_("status", []))

    def test_comparisons(self) -> None:
        assert matches(1, lt("x", 2))
        assert matches(2, lte("x", 2))
        assert matches(2, gte("x", 2))
        assert matches(1, ne("x", 2))

    def test_enum_record_value_matches_plain_condition(self) -> None:
        assert matches(ContractStatus.CANCELED, eq("status", "CANCELED"))

    def test_is_null(self) -> None:
        assert matches(None, is_null("cancellation_date"))
        assert not matches(date(2025, 1, 1), is_null("cancellation_date"))
        assert matches(date(2025, 1, 1), is_null("cancellation_date", null=False))

    @pytest.mark.parametrize("op", ["like", "gt"])
    def test_unknown_operator_raises(self, op: str) -> None:
        with pytest.raises(ValueError, match="Unsupported operator"):
            matches(1, Condition("x", op, 1))  # type: ignore[arg-type]
