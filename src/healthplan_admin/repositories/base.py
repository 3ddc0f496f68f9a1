# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Repository interface shared by the storage backends.

Repositories deal in immutable pydantic records. ``update`` never mutates
a record in place: it stores and returns a validated copy with
``updated_at`` refreshed.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from decimal import Decimal
from typing import Any, Generic, TypeVar
from uuid import UUID

from ..models.base import IdentifiableModel
from .filters import Condition, OrderBy, Where

ModelT = TypeVar("ModelT", bound=IdentifiableModel)


class DuplicateRecordError(Exception):
    """Raised when an insert or update violates a uniqueness rule."""

    def __init__(self, table: str, fields: Sequence[str]) -> None:
        self.table = table
        self.fields = tuple(fields)
        super().__init__(f"Duplicate {table} record on {', '.join(self.fields)}")


class Repository(ABC, Generic[ModelT]):
    """Data access for one entity type."""

    model: type[ModelT]
    table: str

    def _check_fields(self, names: Sequence[str]) -> None:
        unknown = [n for n in names if n not in self.model.model_fields]
        if unknown:
            raise ValueError(f"Unknown {self.table} field(s): {', '.join(unknown)}")

    def _check_where(self, where: Where, order_by: Sequence[OrderBy] = ()) -> None:
        self._check_fields(
            [c.name for c in where] + [o.name for o in order_by]
        )

    @abstractmethod
    async def find(
        self,
        where: Where = (),
        *,
        order_by: Sequence[OrderBy] = (),
        limit: int | None = None,
        offset: int = 0,
    ) -> list[ModelT]:
        """Records matching every condition."""

    @abstractmethod
    async def count(self, where: Where = ()) -> int:
        """Number of records matching every condition."""

    @abstractmethod
    async def sum(self, name: str, where: Where = ()) -> Decimal:
        """Sum of a numeric field over matching records; zero when none match."""

    @abstractmethod
    async def distinct(self, name: str, where: Where = ()) -> list[Any]:
        """Distinct non-null values of a field over matching records."""

    @abstractmethod
    async def insert(self, record: ModelT) -> ModelT:
        """Store a new record."""

    @abstractmethod
    async def update(self, record_id: UUID, changes: dict[str, Any]) -> ModelT | None:
        """Apply ``changes``; ``None`` when the record does not exist.

        The merged record is validated before anything is stored; an invalid
        merge raises ``pydantic.ValidationError`` and leaves the record as it was.
        """

    @abstractmethod
    async def delete(self, record_id: UUID) -> bool:
        """Remove a record; ``False`` when it did not exist."""

    async def get(self, record_id: UUID) -> ModelT | None:
        """Record by primary key."""
        return await self.find_one((Condition("id", "eq", record_id),))

    async def find_one(self, where: Where) -> ModelT | None:
        """First record matching every condition."""
        rows = await self.find(where, limit=1)
        return rows[0] if rows else None

    async def exists(self, where: Where) -> bool:
        return await self.count(where) > 0

    async def find_and_count(
        self,
        where: Where = (),
        *,
        order_by: Sequence[OrderBy] = (),
        limit: int | None = None,
        offset: int = 0,
    ) -> tuple[list[ModelT], int]:
        """A page of matching records and the total number of matches."""
        rows = await self.find(where, order_by=order_by, limit=limit, offset=offset)
        return rows, await self.count(where)
