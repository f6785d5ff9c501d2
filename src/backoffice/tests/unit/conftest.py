"""Unit test fixtures with mocked dependencies."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, Mock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from access.domain.aggregates import Tenant, User
from access.domain.roles import RoleSlug
from access.domain.value_objects import TenantId, UserId, UserStatus
from shared_kernel.session import SessionContext


class FakeClock:
    """Clock pinned to an instant that tests move forward explicitly."""

    def __init__(self, now: datetime):
        self._now = now

    def now(self) -> datetime:
        return self._now

    def advance(self, delta: timedelta) -> None:
        self._now += delta


@pytest.fixture
def t0() -> datetime:
    """A fixed starting instant."""
    return datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def clock(t0) -> FakeClock:
    """Clock starting at t0."""
    return FakeClock(t0)


@pytest.fixture
def mock_session():
    """Mock AsyncSession with transaction support."""
    session = Mock(spec=AsyncSession)

    ctx_manager = AsyncMock()
    ctx_manager.__aenter__ = AsyncMock(return_value=None)
    ctx_manager.__aexit__ = AsyncMock(return_value=None)

    session.begin = Mock(return_value=ctx_manager)
    return session


@pytest.fixture
def session_context() -> SessionContext:
    """Session of an interactive request."""
    return SessionContext(
        request_id="req-01",
        ip_address="203.0.113.7",
        user_agent="pytest",
    )


@pytest.fixture
def tenant() -> Tenant:
    """An active tenant with the default two seats."""
    return Tenant(id=TenantId.generate(), name="Acme", slug="acme", seat_limit=2)


@pytest.fixture
def make_user():
    """Factory for users of a tenant (or platform staff when tenant is None)."""

    def _make(
        role: RoleSlug,
        tenant: Tenant | None = None,
        status: UserStatus = UserStatus.ACTIVE,
        email: str | None = None,
    ) -> User:
        user_id = UserId.generate()
        return User(
            id=user_id,
            email=email or f"{role.value}-{user_id.value[-6:].lower()}@example.com",
            name=role.value.replace("_", " ").title(),
            role=role,
            tenant_id=tenant.id if tenant else None,
            status=status,
        )

    return _make
