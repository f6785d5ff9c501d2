"""PostgreSQL implementation of IUserRepository."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from access.domain.aggregates import User, normalize_email
from access.domain.roles import RoleSlug, get_role
from access.domain.value_objects import TenantId, UserId, UserStatus
from access.infrastructure.models import UserModel
from access.infrastructure.observability import (
    DefaultUserRepositoryProbe,
    UserRepositoryProbe,
)
from access.ports.exceptions import EmailAlreadyInUseError
from access.ports.repositories import IUserRepository

_OWNER_ROLE_ID = get_role(RoleSlug.TENANT_OWNER).id


class UserRepository(IUserRepository):
    """Repository managing PostgreSQL storage for User aggregates."""

    def __init__(
        self,
        session: AsyncSession,
        probe: UserRepositoryProbe | None = None,
    ) -> None:
        """Initialize repository with database session.

        Args:
            session: AsyncSession shared with the calling service
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultUserRepositoryProbe()

    async def save(self, user: User) -> None:
        """Persist a user to PostgreSQL.

        Raises:
            EmailAlreadyInUseError: If another user has the same email
        """
        try:
            stmt = select(UserModel).where(UserModel.id == user.id.value)
            result = await self._session.execute(stmt)
            model = result.scalar_one_or_none()

            tenant_id = user.tenant_id.value if user.tenant_id else None
            role_id = get_role(user.role).id
            if model:
                model.tenant_id = tenant_id
                model.role_id = role_id
                model.status = user.status.value
                model.email = user.email
                model.name = user.name
                model.password_hash = user.password_hash
                model.email_verified = user.email_verified
            else:
                model = UserModel(
                    id=user.id.value,
                    tenant_id=tenant_id,
                    role_id=role_id,
                    status=user.status.value,
                    email=user.email,
                    name=user.name,
                    password_hash=user.password_hash,
                    email_verified=user.email_verified,
                )
                self._session.add(model)

            await self._session.flush()
        except IntegrityError as e:
            if "email" in str(e):
                self._probe.duplicate_email(user.id.value)
                raise EmailAlreadyInUseError() from e
            raise

        self._probe.user_saved(user.id.value, tenant_id)

    async def get_by_id(self, user_id: UserId, for_update: bool = False) -> User | None:
        """Fetch a user, optionally locking its row."""
        stmt = select(UserModel).where(UserModel.id == user_id.value)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model else None

    async def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (normalized before lookup)."""
        stmt = select(UserModel).where(UserModel.email == normalize_email(email))
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model else None

    async def count_active(self, tenant_id: TenantId) -> int:
        """Count ACTIVE users of a tenant."""
        stmt = (
            select(func.count())
            .select_from(UserModel)
            .where(
                UserModel.tenant_id == tenant_id.value,
                UserModel.status == UserStatus.ACTIVE.value,
            )
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def count_owners(
        self, tenant_id: TenantId, exclude: UserId | None = None
    ) -> int:
        """Count owners of a tenant regardless of status."""
        stmt = (
            select(func.count())
            .select_from(UserModel)
            .where(
                UserModel.tenant_id == tenant_id.value,
                UserModel.role_id == _OWNER_ROLE_ID,
            )
        )
        if exclude is not None:
            stmt = stmt.where(UserModel.id != exclude.value)
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def list_by_tenant(self, tenant_id: TenantId | None) -> list[User]:
        """List users of a tenant (or platform staff) ordered by name."""
        if tenant_id is None:
            condition = UserModel.tenant_id.is_(None)
        else:
            condition = UserModel.tenant_id == tenant_id.value
        stmt = select(UserModel).where(condition).order_by(UserModel.name)
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    @staticmethod
    def _to_domain(model: UserModel) -> User:
        return User(
            id=UserId(value=model.id),
            email=model.email,
            name=model.name,
            role=get_role(model.role_id).slug,
            tenant_id=TenantId(value=model.tenant_id) if model.tenant_id else None,
            status=UserStatus(model.status),
            password_hash=model.password_hash,
            email_verified=model.email_verified,
        )
