# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""PostgreSQL repository compiling conditions to parameterised SQL.

Column names are the model's field names; they are checked against the
model before being interpolated, values are always bound as ``$n``
parameters. Database errors other than unique violations propagate
unchanged.
"""

import logging
from collections.abc import Sequence
from decimal import Decimal
from typing import Any, Generic
from uuid import UUID

import asyncpg
from beartype import beartype

from ..core.database import Database
from ..models.base import utc_now
from .base import DuplicateRecordError, ModelT, Repository
from .filters import Condition, OrderBy, Where, plain

logger = logging.getLogger(__name__)

_COMPARISONS = {"eq": "=", "ne": "<>", "lt": "<", "lte": "<=", "gte": ">="}


@beartype
def compile_where(where: Where, start: int = 1) -> tuple[str, list[Any]]:
    """Compile conditions to a WHERE clause and its bind parameters.

    Returns an empty clause when there are no conditions. Placeholders are
    numbered from ``start`` so callers can prepend their own parameters.
    """
    clauses: list[str] = []
    params: list[Any] = []

    def bind(value: Any) -> str:
        params.append(plain(value))
        return f"${start + len(params) - 1}"

    for condition in where:
        column = f'"{condition.name}"'
        op = condition.op
        if op in _COMPARISONS:
            clauses.append(f"{column} {_COMPARISONS[op]} {bind(condition.value)}")
        elif op == "in":
            clauses.append(f"{column} = ANY({bind(list(condition.value))})")
        elif op == "between":
            low = bind(condition.value)
            high = bind(condition.upper)
            clauses.append(f"{column} BETWEEN {low} AND {high}")
        elif op == "is_null":
            clauses.append(f"{column} IS {'' if condition.value else 'NOT '}NULL")
        else:
            raise ValueError(f"Unsupported operator: {op}")

    if not clauses:
        return "", params
    return " WHERE " + " AND ".join(clauses), params


@beartype
def compile_order_by(order_by: Sequence[OrderBy]) -> str:
    if not order_by:
        return ""
    keys = [f'"{o.name}" {"DESC" if o.descending else "ASC"}' for o in order_by]
    return " ORDER BY " + ", ".join(keys)


class PostgresRepository(Repository[ModelT], Generic[ModelT]):
    """asyncpg-backed repository for one table."""

    def __init__(self, db: Database, model: type[ModelT], table: str) -> None:
        if not db or not hasattr(db, "fetch"):
            raise ValueError("Database connection required and must be active")
        self._db = db
        self.model = model
        self.table = table

    def _to_record(self, row: Any) -> ModelT:
        return self.model.model_validate(dict(row))

    def _columns(self, data: dict[str, Any]) -> tuple[list[str], list[Any]]:
        self._check_fields(list(data))
        return list(data), [plain(v) for v in data.values()]

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
        clause, params = compile_where(where)
        query = f'SELECT * FROM "{self.table}"{clause}{compile_order_by(order_by)}'
        if limit is not None:
            params.append(limit)
            query += f" LIMIT ${len(params)}"
        if offset:
            params.append(offset)
            query += f" OFFSET ${len(params)}"
        rows = await self._db.fetch(query, *params)
        return [self._to_record(row) for row in rows]

    @beartype
    async def count(self, where: Where = ()) -> int:
        self._check_where(where)
        clause, params = compile_where(where)
        value = await self._db.fetchval(
            f'SELECT COUNT(*) FROM "{self.table}"{clause}', *params
        )
        return int(value or 0)

    @beartype
    async def sum(self, name: str, where: Where = ()) -> Decimal:
        self._check_fields([name])
        self._check_where(where)
        clause, params = compile_where(where)
        value = await self._db.fetchval(
            f'SELECT COALESCE(SUM("{name}"), 0) FROM "{self.table}"{clause}', *params
        )
        return Decimal(value or 0)

    @beartype
    async def distinct(self, name: str, where: Where = ()) -> list[Any]:
        self._check_fields([name])
        self._check_where(where)
        clause, params = compile_where(where + (Condition(name, "is_null", False),))
        rows = await self._db.fetch(
            f'SELECT DISTINCT "{name}" FROM "{self.table}"{clause}', *params
        )
        return [row[name] for row in rows]

    @beartype
    async def insert(self, record: ModelT) -> ModelT:
        columns, values = self._columns(record.model_dump())
        placeholders = ", ".join(f"${i}" for i in range(1, len(values) + 1))
        column_list = ", ".join(f'"{c}"' for c in columns)
        query = (
            f'INSERT INTO "{self.table}" ({column_list}) '
            f"VALUES ({placeholders}) RETURNING *"
        )
        try:
            row = await self._db.fetchrow(query, *values)
        except asyncpg.UniqueViolationError as e:
            logger.warning("Unique violation on %s: %s", self.table, e.constraint_name)
            raise DuplicateRecordError(self.table, (e.constraint_name or "unique",)) from e
        return self._to_record(row)

    @beartype
    async def update(self, record_id: UUID, changes: dict[str, Any]) -> ModelT | None:
        """Validate the merged record, then write the changed columns.

        The current row is locked with ``FOR UPDATE`` so the check and the
        write see the same record. An invalid merge raises the model's
        ``ValidationError`` and nothing is written.
        """
        data = {**changes, "updated_at": utc_now()}
        columns, values = self._columns(data)
        assignments = ", ".join(f'"{c}" = ${i}' for i, c in enumerate(columns, start=1))
        values.append(record_id)
        query = (
            f'UPDATE "{self.table}" SET {assignments} '
            f"WHERE id = ${len(values)} RETURNING *"
        )
        try:
            async with self._db.transaction() as conn:
                current = await conn.fetchrow(
                    f'SELECT * FROM "{self.table}" WHERE id = $1 FOR UPDATE', record_id
                )
                if current is None:
                    return None
                self.model.model_validate({**dict(current), **data})
                row = await conn.fetchrow(query, *values)
        except asyncpg.UniqueViolationError as e:
            logger.warning("Unique violation on %s: %s", self.table, e.constraint_name)
            raise DuplicateRecordError(self.table, (e.constraint_name or "unique",)) from e
        return self._to_record(row)

    @beartype
    async def delete(self, record_id: UUID) -> bool:
        status = await self._db.execute(
            f'DELETE FROM "{self.table}" WHERE id = $1', record_id
        )
        return status.endswith(" 1")
