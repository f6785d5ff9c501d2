"""Integration test fixtures for database tests.

These fixtures require a running PostgreSQL instance. Tests are skipped when
the database cannot be reached.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from pydantic import SecretStr
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

import infrastructure.audit.models  # noqa: F401  (registers the audit_logs table)
from access.domain.aggregates import User
from access.domain.roles import RoleSlug
from access.infrastructure.models import seed_roles
from access.infrastructure.user_repository import UserRepository
from infrastructure.database.engines import create_engine
from infrastructure.database.models import Base
from infrastructure.settings import DatabaseSettings


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (requires database)",
    )


class MovableClock:
    """Clock starting at the real time that tests can shift."""

    def __init__(self):
        self._offset = timedelta(0)

    def now(self) -> datetime:
        return datetime.now(UTC) + self._offset

    def shift(self, delta: timedelta) -> None:
        self._offset += delta


@pytest.fixture(scope="session")
def integration_db_settings() -> DatabaseSettings:
    """Database settings for integration tests.

    Override with environment variables:
        BACKOFFICE_DB_HOST, BACKOFFICE_DB_PORT, etc.
    """
    return DatabaseSettings(
        host=os.getenv("BACKOFFICE_DB_HOST", "localhost"),
        port=int(os.getenv("BACKOFFICE_DB_PORT", "5432")),
        database=os.getenv("BACKOFFICE_DB_DATABASE", "backoffice"),
        username=os.getenv("BACKOFFICE_DB_USERNAME", "backoffice"),
        password=SecretStr(os.getenv("BACKOFFICE_DB_PASSWORD", "backoffice_dev_password")),
        pool_max_connections=5,
    )


@pytest_asyncio.fixture
async def session_factory(
    integration_db_settings: DatabaseSettings,
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Provide a session factory over a freshly prepared schema.

    Creates missing tables, seeds the role catalog and empties the Access
    tables before each test.
    """
    engine = create_engine(integration_db_settings)
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (OSError, SQLAlchemyError) as e:
        await engine.dispose()
        pytest.skip(f"PostgreSQL not reachable: {e}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        for table in ("audit_logs", "invitations", "users", "tenants"):
            await conn.execute(text(f"DELETE FROM {table}"))

    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        async with session.begin():
            await seed_roles(session)

    yield factory

    await engine.dispose()


@pytest_asyncio.fixture
async def async_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Provide an async session for integration tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock() -> MovableClock:
    return MovableClock()


@pytest_asyncio.fixture
async def super_admin(async_session: AsyncSession) -> User:
    """A platform super admin stored directly, as a bootstrap script would."""
    user = User.create(
        email="root@example.com",
        name="Root",
        role=RoleSlug.PLATFORM_SUPER_ADMIN,
        tenant_id=None,
        password_hash=None,
    )
    async with async_session.begin():
        await UserRepository(session=async_session).save(user)
    return user
