"""Test configuration and shared fixtures.

Tests run against the in-memory repositories; nothing here needs a
database. Environment defaults are set before the application package is
imported so the cached settings pick them up.
"""

import os

os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("API_ENV", "development")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from collections.abc import Iterator
from datetime import datetime, timezone
from uuid import UUID

import pytest
import pytest_asyncio

from healthplan_admin.core.config import Settings, clear_settings_cache
from healthplan_admin.core.security import Security
from healthplan_admin.repositories import Repositories, memory_repositories
from tests.fixtures.factories import add_company


@pytest.fixture(autouse=True)
def _fresh_settings() -> Iterator[None]:
    """Drop cached settings so environment changes do not leak between tests."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def settings() -> Settings:
    return Settings(storage_backend="memory", bcrypt_rounds=4)


@pytest.fixture
def security(settings: Settings) -> Security:
    return Security(settings)


@pytest.fixture
def repos() -> Repositories:
    """Fresh, empty in-memory repositories."""
    return memory_repositories()


@pytest_asyncio.fixture
async def company_id(repos: Repositories) -> UUID:
    """Id of a stored insurance company."""
    company = await add_company(repos)
    return company.id


@pytest.fixture
def now() -> datetime:
    """Fixed reference instant for analytics computations."""
    return datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)
