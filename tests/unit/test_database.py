"""Unit tests for the asyncpg pool wrapper.

The pool and connection are small fakes recording what the wrapper does
with them; no server is contacted.
"""

import contextlib
import json
from collections.abc import AsyncIterator
from datetime import date
from decimal import Decimal
from typing import Any, Callable

import pytest

from healthplan_admin.core.config import Settings
from healthplan_admin.core.database import Database


class FakeConnection:
    def __init__(self) -> None:
        self.events: list[str] = []
        self.codecs: dict[str, tuple[Callable[[Any], str], Callable[[str], Any]]] = {}

    @contextlib.asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        self.events.append("begin")
        try:
            yield
        except BaseException:
            self.events.append("rollback")
            raise
        self.events.append("commit")

    async def set_type_codec(
        self,
        type_name: str,
        *,
        encoder: Callable[[Any], str],
        decoder: Callable[[str], Any],
        schema: str,
    ) -> None:
        self.codecs[type_name] = (encoder, decoder)


class FakePool:
    def __init__(self, conn: FakeConnection) -> None:
        self.conn = conn
        self.timeouts: list[float | None] = []

    @contextlib.asynccontextmanager
    async def acquire(self, *, timeout: float | None = None) -> AsyncIterator[FakeConnection]:
        self.timeouts.append(timeout)
        yield self.conn


@pytest.fixture
def conn() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def db(settings: Settings, conn: FakeConnection) -> Database:
    database = Database(settings)
    database._pool = FakePool(conn)  # type: ignore[assignment]
    return database


class TestDatabase:
    """Test connection handling around the pool."""

    @pytest.mark.asyncio
    async def test_acquire_requires_connect(self, settings: Settings) -> None:
        database = Database(settings)
        assert not database.is_connected
        with pytest.raises(RuntimeError, match="Database not connected"):
            async with database.acquire():
                pass

    @pytest.mark.asyncio
    async def test_acquire_uses_configured_timeout(
        self, db: Database, settings: Settings
    ) -> None:
        async with db.acquire():
            pass
        async with db.acquire(timeout=2.5):
            pass
        assert db._pool.timeouts == [settings.database_pool_timeout, 2.5]  # type: ignore[union-attr]

    @pytest.mark.asyncio
    async def test_transaction_commits(self, db: Database, conn: FakeConnection) -> None:
        async with db.transaction() as tx_conn:
            assert tx_conn is conn
        assert conn.events == ["begin", "commit"]

    @pytest.mark.asyncio
    async def test_transaction_rolls_back_on_error(
        self, db: Database, conn: FakeConnection
    ) -> None:
        with pytest.raises(ValueError, match="merge failed"):
            async with db.transaction():
                raise ValueError("merge failed")
        assert conn.events == ["begin", "rollback"]

    @pytest.mark.asyncio
    async def test_json_codecs_handle_decimals_and_dates(
        self, db: Database, conn: FakeConnection
    ) -> None:
        await db._init_connection(conn)  # type: ignore[arg-type]

        assert set(conn.codecs) == {"json", "jsonb"}
        encode, decode = conn.codecs["jsonb"]
        encoded = encode({"factor": Decimal("1.15"), "effective": date(2025, 1, 1)})
        assert json.loads(encoded) == {"factor": "1.15", "effective": "2025-01-01"}
        assert decode('{"age_bands": [18, 30]}') == {"age_bands": [18, 30]}
