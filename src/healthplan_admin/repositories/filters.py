# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Query conditions understood by every repository backend.

A ``where`` clause is a tuple of conditions combined with AND. The same
tuple is compiled to SQL by the PostgreSQL repository and evaluated in
Python by the in-memory one, so both must agree on the semantics below:

- ``between`` is a closed interval: both bounds match.
- comparisons against a NULL column never match.
- ``in_`` with an empty collection matches nothing.
"""

from collections.abc import Iterable
from enum import Enum
from typing import Any, Literal

from attrs import field, frozen
from beartype import beartype

Operator = Literal["eq", "ne", "in", "between", "lt", "lte", "gte", "is_null"]


@frozen
class Condition:
    """One predicate on a single model field."""

    name: str = field()
    op: Operator = field()
    value: Any = field(default=None)
    upper: Any = field(default=None)  # Only used by ``between``


@frozen
class OrderBy:
    """Sort key for ``find``."""

    name: str = field()
    descending: bool = field(default=False)


Where = tuple[Condition, ...]


@beartype
def plain(value: Any) -> Any:
    """Strip enum wrappers so values compare and bind as their raw form."""
    if isinstance(value, Enum):
        return value.value
    return value


@beartype
def eq(name: str, value: Any) -> Condition:
    """Field equals value."""
    return Condition(name, "eq", plain(value))


@beartype
def ne(name: str, value: Any) -> Condition:
    """Field differs from value (NULL never matches)."""
    return Condition(name, "ne", plain(value))


@beartype
def in_(name: str, values: Iterable[Any]) -> Condition:
    """Field is one of ``values``."""
    return Condition(name, "in", tuple(plain(v) for v in values))


@beartype
def between(name: str, low: Any, high: Any) -> Condition:
    """Field lies in the closed interval ``[low, high]``."""
    return Condition(name, "between", low, high)


@beartype
def lt(name: str, value: Any) -> Condition:
    return Condition(name, "lt", value)


@beartype
def lte(name: str, value: Any) -> Condition:
    return Condition(name, "lte", value)


@beartype
def gte(name: str, value: Any) -> Condition:
    return Condition(name, "gte", value)


@beartype
def is_null(name: str, null: bool = True) -> Condition:
    """Field is NULL (or NOT NULL when ``null`` is False)."""
    return Condition(name, "is_null", null)


@beartype
def asc(name: str) -> OrderBy:
    return OrderBy(name)


@beartype
def desc(name: str) -> OrderBy:
    return OrderBy(name, descending=True)


@beartype
def matches(record_value: Any, condition: Condition) -> bool:
    """Evaluate ``condition`` against one field value in Python."""
    value = plain(record_value)
    op = condition.op

    if op == "is_null":
        return (value is None) == bool(condition.value)
    if value is None:
        return False
    if op == "eq":
        return bool(value == condition.value)
    if op == "ne":
        return bool(value != condition.value)
    if op == "in":
        return value in condition.value
    if op == "between":
        return bool(condition.value <= value <= condition.upper)
    if op == "lt":
        return bool(value < condition.value)
    if op == "lte":
        return bool(value <= condition.value)
    if op == "gte":
        return bool(value >= condition.value)
    raise ValueError(f"Unsupported operator: {op}")
