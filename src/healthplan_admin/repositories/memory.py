# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""In-process repository used by tests and the ``memory`` storage backend."""

from collections.abc import Sequence
from decimal import Decimal
from typing import Any, Generic
from uuid import UUID

from beartype import beartype

from ..models.base import utc_now
from .base import DuplicateRecordError, ModelT, Repository
from .filters import OrderBy, Where, matches, plain


class InMemoryRepository(Repository[ModelT], Generic[ModelT]):
    """Dict-backed repository evaluating conditions in Python.

    ``unique_fields`` lists the field groups that must be unique across
    records, mirroring the table's unique constraints.
    """

    def __init__(
        self,
        model: type[ModelT],
        table: str,
        unique_fields: Sequence[Sequence[str]] = (),
    ) -> None:
        self.model = model
        self.table = table
        self._unique_fields = tuple(tuple(group) for group in unique_fields)
        self._records: dict[UUID, ModelT] = {}

    def _select(self, where: Where) -> list[ModelT]:
        self._check_where(where)
        return [
            record
            for record in self._records.values()
            if all(matches(getattr(record, c.name), c) for c in where)
        ]

    def _check_unique(self, record: ModelT) -> None:
        for group in self._unique_fields:
            key = tuple(plain(getattr(record, name)) for name in group)
            if any(v is None for v in key):
                continue
            for other in self._records.values():
                if other.id == record.id:
                    continue
                if tuple(plain(getattr(other, name)) for name in group) == key:
                    raise DuplicateRecordError(self.table, group)

    @beartype
    async def find(
        self,
        where: Where = (),
        *,
        order_by: Sequence[OrderBy] = (),
        limit: int | None = None,
        offset: int = 0,
    ) -> list[ModelT]:
        self._check_where(where, order_by)
        rows = self._select(where)
        # Stable sorts applied last-key-first give a multi-key ordering.
        for key in reversed(order_by):
            rows.sort(
                key=lambda r, name=key.name: (
                    getattr(r, name) is None,
                    plain(getattr(r, name)),
                ),
                reverse=key.descending,
            )
        rows = rows[offset:]
        return rows if limit is None else rows[:limit]

    @beartype
    async def count(self, where: Where = ()) -> int:
        return len(self._select(where))

    @beartype
    async def sum(self, name: str, where: Where = ()) -> Decimal:
        self._check_fields([name])
        total = Decimal("0")
        for record in self._select(where):
            value = getattr(record, name)
            if value is not None:
                total += Decimal(value)
        return total

    @beartype
    async def distinct(self, name: str, where: Where = ()) -> list[Any]:
        self._check_fields([name])
        seen: dict[Any, None] = {}
        for record in self._select(where):
            value = getattr(record, name)
            if value is not None:
                seen.setdefault(value, None)
        return list(seen)

    @beartype
    async def insert(self, record: ModelT) -> ModelT:
        if record.id in self._records:
            raise DuplicateRecordError(self.table, ("id",))
        self._check_unique(record)
        self._records[record.id] = record
        return record

    @beartype
    async def update(self, record_id: UUID, changes: dict[str, Any]) -> ModelT | None:
        self._check_fields(list(changes))
        current = self._records.get(record_id)
        if current is None:
            return None
        data = current.model_dump()
        data.update(changes)
        data["updated_at"] = utc_now()
        updated = self.model.model_validate(data)
        self._check_unique(updated)
        self._records[record_id] = updated
        return updated

    @beartype
    async def delete(self, record_id: UUID) -> bool:
        return self._records.pop(record_id, None) is not None
