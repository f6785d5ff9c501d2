"""PostgreSQL implementation of ITenantRepository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from access.domain.aggregates import Tenant
from access.domain.value_objects import TenantId, TenantStatus
from access.infrastructure.models import TenantModel
from access.infrastructure.observability import (
    DefaultTenantRepositoryProbe,
    TenantRepositoryProbe,
)
from access.ports.exceptions import DuplicateTenantSlugError
from access.ports.repositories import ITenantRepository


class TenantRepository(ITenantRepository):
    """Repository managing PostgreSQL storage for Tenant aggregates."""

    def __init__(
        self,
        session: AsyncSession,
        probe: TenantRepositoryProbe | None = None,
    ) -> None:
        """Initialize repository with database session.

        Args:
            session: AsyncSession shared with the calling service
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultTenantRepositoryProbe()

    async def save(self, tenant: Tenant) -> None:
        """Persist tenant to PostgreSQL.

        Raises:
            DuplicateTenantSlugError: If another tenant already uses the slug
        """
        existing = await self.get_by_slug(tenant.slug)
        if existing and existing.id != tenant.id:
            self._probe.duplicate_tenant_slug(tenant.slug)
            raise DuplicateTenantSlugError()

        try:
            stmt = select(TenantModel).where(TenantModel.id == tenant.id.value)
            result = await self._session.execute(stmt)
            model = result.scalar_one_or_none()

            if model:
                model.name = tenant.name
                model.status = tenant.status.value
                model.seat_limit = tenant.seat_limit
                model.deleted_at = tenant.deleted_at
            else:
                model = TenantModel(
                    id=tenant.id.value,
                    name=tenant.name,
                    slug=tenant.slug,
                    status=tenant.status.value,
                    seat_limit=tenant.seat_limit,
                    deleted_at=tenant.deleted_at,
                )
                self._session.add(model)

            # Flush to surface integrity errors inside the caller's transaction
            await self._session.flush()
        except IntegrityError as e:
            if "slug" in str(e):
                self._probe.duplicate_tenant_slug(tenant.slug)
                raise DuplicateTenantSlugError() from e
            raise

        self._probe.tenant_saved(tenant.id.value)

    async def get_by_id(
        self, tenant_id: TenantId, for_update: bool = False
    ) -> Tenant | None:
        """Fetch a tenant, optionally locking its row.

        Args:
            tenant_id: The unique identifier of the tenant
            for_update: Lock the row until the transaction ends

        Returns:
            The Tenant aggregate, or None if not found
        """
        stmt = select(TenantModel).where(TenantModel.id == tenant_id.value)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        self._probe.tenant_retrieved(model.id, locked=for_update)
        return self._to_domain(model)

    async def get_by_slug(self, slug: str) -> Tenant | None:
        """Fetch a tenant by slug."""
        stmt = select(TenantModel).where(TenantModel.slug == slug)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model else None

    async def list_all(self, include_deleted: bool = False) -> list[Tenant]:
        """Fetch tenants ordered by name."""
        stmt = select(TenantModel).order_by(TenantModel.name)
        if not include_deleted:
            stmt = stmt.where(TenantModel.deleted_at.is_(None))
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    @staticmethod
    def _to_domain(model: TenantModel) -> Tenant:
        return Tenant(
            id=TenantId(value=model.id),
            name=model.name,
            slug=model.slug,
            status=TenantStatus(model.status),
            seat_limit=model.seat_limit,
            deleted_at=model.deleted_at,
        )
