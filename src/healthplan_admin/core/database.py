# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Database connection management with asyncpg and connection pooling.

Every request acquires its own connection; read queries run in the
database's default (read committed) isolation. There is no retry logic:
a failed round-trip raises to the caller.
"""

import contextlib
import json
import logging
import time
from collections.abc import AsyncIterator
from typing import Any

import asyncpg
from attrs import field, frozen
from beartype import beartype

from .config import Settings, get_settings

logger = logging.getLogger(__name__)


@frozen
class PoolConfig:
    """Immutable pool configuration."""

    min_connections: int = field()
    max_connections: int = field()
    connection_timeout: float = field(default=10.0)
    command_timeout: float = field(default=30.0)
    server_settings: dict[str, str] = field(factory=dict)


class Database:
    """asyncpg pool wrapper used by the repository layer."""

    SLOW_QUERY_MS = 1000.0

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize database manager."""
        self._pool: asyncpg.Pool | None = None
        self._settings = settings or get_settings()

    @beartype
    def _get_pool_config(self) -> PoolConfig:
        """Build pool configuration from settings."""
        return PoolConfig(
            min_connections=self._settings.database_pool_min,
            max_connections=self._settings.database_pool_max,
            connection_timeout=self._settings.database_pool_timeout,
            command_timeout=self._settings.database_command_timeout,
            server_settings={
                "application_name": "healthplan_admin",
                "timezone": "UTC",
            },
        )

    async def _init_connection(self, conn: asyncpg.Connection) -> None:
        """Register JSON codecs on each new connection."""
        for type_name in ("json", "jsonb"):
            await conn.set_type_codec(
                type_name,
                encoder=lambda value: json.dumps(value, default=str),
                decoder=json.loads,
                schema="pg_catalog",
            )

    @beartype
    async def connect(self) -> None:
        """Create the connection pool."""
        if self._pool is not None:
            return

        config = self._get_pool_config()
        self._pool = await asyncpg.create_pool(
            self._settings.database_url,
            min_size=config.min_connections,
            max_size=config.max_connections,
            timeout=config.connection_timeout,
            command_timeout=config.command_timeout,
            server_settings=config.server_settings,
            init=self._init_connection,
        )
        logger.info(
            "Database pool ready (min=%s, max=%s)",
            config.min_connections,
            config.max_connections,
        )

    @beartype
    async def disconnect(self) -> None:
        """Close the connection pool."""
        if self._pool is not None:
            await self._pool.close()
            logger.info("Database pool closed")
        self._pool = None

    @contextlib.asynccontextmanager
    async def acquire(
        self, *, timeout: float | None = None
    ) -> AsyncIterator[asyncpg.Connection]:
        """Acquire a connection from the pool."""
        if self._pool is None:
            raise RuntimeError("Database not connected")

        timeout = timeout or self._settings.database_pool_timeout
        async with self._pool.acquire(timeout=timeout) as conn:
            yield conn

    @contextlib.asynccontextmanager
    async def transaction(self) -> AsyncIterator[asyncpg.Connection]:
        """Create a database transaction context."""
        async with self.acquire() as conn:
            async with conn.transaction():
                yield conn

    @contextlib.asynccontextmanager
    async def _timed(self, query: str) -> AsyncIterator[None]:
        start = time.perf_counter()
        try:
            yield
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            if duration_ms > self.SLOW_QUERY_MS:
                logger.warning("Slow query (%.1fms): %s", duration_ms, query.strip()[:200])

    @beartype
    async def execute(self, query: str, *args: Any) -> str:
        """Execute a query without returning results."""
        async with self._timed(query), self.acquire() as conn:
            return await conn.execute(query, *args)

    @beartype
    async def fetch(self, query: str, *args: Any) -> list[asyncpg.Record]:
        """Execute a query and fetch all results."""
        async with self._timed(query), self.acquire() as conn:
            return await conn.fetch(query, *args)

    @beartype
    async def fetchrow(self, query: str, *args: Any) -> asyncpg.Record | None:
        """Execute a query and fetch a single row."""
        async with self._timed(query), self.acquire() as conn:
            return await conn.fetchrow(query, *args)

    @beartype
    async def fetchval(self, query: str, *args: Any) -> Any:
        """Execute a query and fetch a single value."""
        async with self._timed(query), self.acquire() as conn:
            return await conn.fetchval(query, *args)

    @property
    def is_connected(self) -> bool:
        """Check if database is connected."""
        return self._pool is not None


_database: Database | None = None


@beartype
def get_database() -> Database:
    """Get global database instance."""
    global _database
    if _database is None:
        _database = Database()
    return _database

