"""
Core pytest configuration for the entire test suite.

Only the database setup and logging installation shared by every test layer
live here. Domain fixtures (repositories, services, HTTP clients) are in
tests/test_fixtures/ and re-exported at the bottom of this module.
"""

from __future__ import annotations

import os
import logging
from typing import AsyncGenerator
from urllib.parse import urlparse

# Quiet noisy third-party loggers before anything imports them.
NOISY_LOGGERS = (
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "asyncio",
    "aiosqlite",
    "httpx",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from reservation_api.config import get_settings
from reservation_api.core.logging.builder import setup_logging, stop_queue_logging
from reservation_api.database.base import Base
from reservation_api.models import group  # noqa: F401 - registers the groups table

settings = get_settings()
logger = logging.getLogger(__name__)


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """
    Install the application's logging for the whole session. pytest adds its
    capture handler per test phase, so caplog still sees every record.
    """
    setup_logging(settings)

    yield

    stop_queue_logging()


def safe_log_db_url(db_url: str) -> str:
    """The database URL without credentials."""
    parsed = urlparse(db_url)
    return f"{parsed.scheme}://{parsed.hostname or ''}:{parsed.port or ''}/{parsed.path.lstrip('/')}"


def get_test_database_url(tmp_path) -> str:
    """
    Database URL for one test.

    1. TEST_DATABASE_URL (e.g. a PostgreSQL database in CI).
    2. The app's DATABASE_URL when TESTING=true and TEST_POSTGRES_DB is set.
    3. A fresh SQLite file under the test's tmp_path.
    """
    if test_url := os.getenv("TEST_DATABASE_URL"):
        return test_url
    if settings.TESTING and settings.TEST_POSTGRES_DB:
        return settings.DATABASE_URL
    return f"sqlite+aiosqlite:///{tmp_path / 'test_database.db'}"


# ------------------------------------------------------------------------------------------------
# DATABASE FIXTURES
# ------------------------------------------------------------------------------------------------


@pytest.fixture()
async def async_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """A per-test engine with all tables created (and dropped afterwards)."""
    url = get_test_database_url(tmp_path)
    logger.debug("Using test DB: %s", safe_log_db_url(url))

    engine = create_async_engine(url, echo=False, pool_pre_ping=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture()
def session_maker(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
async def db_session(session_maker: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """
    A session on the per-test database. Code under test may commit freely:
    the whole database is discarded with the test.
    """
    async with session_maker() as session:
        yield session


# Shared fixtures from test_fixtures/
from .test_fixtures.repository_fixtures import (  # noqa: E402,F401
    group_repository,
    group_service,
    make_group,
    create_group,
)
from .test_fixtures.api_fixtures import (  # noqa: E402,F401
    app_settings,
    app,
    client,
    mock_service,
    mocked_client,
)
