"""Tenant application service for the Access bounded context.

Platform staff create, rename, suspend, resume and soft-delete tenants.
Tenant managers may rename their own tenant and everyone may view theirs.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from access.application.observability import (
    DefaultTenantServiceProbe,
    TenantServiceProbe,
)
from access.application.services.common import load_actor, require_tenant
from access.domain.aggregates import Tenant
from access.domain.policy import Action, Actor, ResourceKind, ResourceTarget, evaluate
from access.domain.value_objects import TenantId, UserId
from access.ports.exceptions import (
    AccessError,
    DuplicateTenantSlugError,
    InvalidSeatLimitError,
    NoChangeError,
)
from access.ports.repositories import ITenantRepository, IUserRepository
from shared_kernel.audit import AuditAction, AuditOptions, IAuditTrail
from shared_kernel.clock import Clock, SystemClock
from shared_kernel.session import SessionContext


class TenantService:
    """Application service for tenant administration."""

    def __init__(
        self,
        tenant_repository: ITenantRepository,
        user_repository: IUserRepository,
        audit_trail: IAuditTrail,
        session: AsyncSession,
        clock: Clock | None = None,
        default_seat_limit: int = 2,
        max_seat_limit: int = 10000,
        audit_options: AuditOptions | None = None,
        probe: TenantServiceProbe | None = None,
    ):
        """Initialize TenantService with dependencies.

        Args:
            tenant_repository: Repository for tenant persistence
            user_repository: Repository used to load the actor
            audit_trail: Audit trail bound to the same session
            session: Database session for transaction management
            clock: Source of the current instant
            default_seat_limit: Seat limit for tenants created without one
            max_seat_limit: Highest seat limit allowed
            audit_options: Audit enrichment and redaction options
            probe: Optional domain probe for observability
        """
        self._tenants = tenant_repository
        self._users = user_repository
        self._audit = audit_trail
        self._session = session
        self._clock = clock or SystemClock()
        self._default_seat_limit = default_seat_limit
        self._max_seat_limit = max_seat_limit
        self._audit_options = audit_options or AuditOptions()
        self._probe = probe or DefaultTenantServiceProbe()

    async def create_tenant(
        self,
        actor_id: UserId,
        name: str,
        slug: str,
        context: SessionContext,
        seat_limit: int | None = None,
    ) -> Tenant:
        """Create a tenant.

        Args:
            actor_id: The acting platform super admin
            name: Display name
            slug: Unique, immutable URL identifier
            context: Request session
            seat_limit: Seats granted (defaults to the configured limit)

        Raises:
            ForbiddenError: If the actor is not platform staff
            InvalidSeatLimitError: If seat_limit is out of range
            DuplicateTenantSlugError: If the slug is already taken
            ValueError: If name or slug is malformed
        """
        now = self._clock.now()
        limit = seat_limit if seat_limit is not None else self._default_seat_limit
        try:
            async with self._session.begin():
                actor = await load_actor(self._users, actor_id)
                evaluate(
                    actor,
                    Action.CREATE_TENANT,
                    ResourceTarget(ResourceKind.TENANT, None),
                ).raise_if_denied()
                if limit < 1 or limit > self._max_seat_limit:
                    raise InvalidSeatLimitError(limit=limit, maximum=self._max_seat_limit)
                if await self._tenants.get_by_slug(slug) is not None:
                    raise DuplicateTenantSlugError()

                tenant = Tenant.create(name=name, slug=slug, seat_limit=limit)
                await self._tenants.save(tenant)

                entry = (
                    self._audit_options.builder(now)
                    .for_actor(actor.as_audit_actor())
                    .on("tenant", tenant.id)
                    .in_tenant(tenant.id)
                    .action(AuditAction.TENANT_CREATED)
                    .changes_from(
                        {}, tenant.snapshot(), only=("name", "slug", "status", "seat_limit")
                    )
                    .with_session(context)
                    .build()
                )
                await self._audit.record(entry)
        except AccessError as e:
            self._probe.tenant_operation_rejected("create", e.code)
            raise

        self._probe.tenant_created(tenant.id.value, tenant.slug, tenant.seat_limit)
        return tenant

    async def update_tenant(
        self,
        actor_id: UserId,
        tenant_id: TenantId,
        name: str,
        context: SessionContext,
    ) -> Tenant:
        """Rename a tenant. The slug never changes.

        Raises:
            TenantNotFoundError: If the tenant does not exist or is deleted
            ForbiddenError: If the actor may not update the tenant
            NoChangeError: If the name is unchanged
        """
        now = self._clock.now()
        try:
            async with self._session.begin():
                actor = await load_actor(self._users, actor_id)
                tenant = await require_tenant(self._tenants, tenant_id, for_update=True)
                evaluate(
                    actor,
                    Action.UPDATE_TENANT,
                    ResourceTarget(ResourceKind.TENANT, tenant.id),
                ).raise_if_denied()

                before = tenant.snapshot()
                if not tenant.rename(name):
                    raise NoChangeError("The tenant already has this name.")
                await self._tenants.save(tenant)
                await self._record(
                    actor, tenant, AuditAction.TENANT_UPDATED, before, now, context
                )
        except AccessError as e:
            self._probe.tenant_operation_rejected("update", e.code, tenant_id.value)
            raise

        self._probe.tenant_updated(tenant.id.value, "renamed")
        return tenant

    async def suspend_tenant(
        self, actor_id: UserId, tenant_id: TenantId, context: SessionContext
    ) -> Tenant:
        """Suspend a tenant; suspending a suspended tenant changes nothing."""
        return await self._toggle(
            actor_id, tenant_id, context, Action.SUSPEND_TENANT, "suspend"
        )

    async def resume_tenant(
        self, actor_id: UserId, tenant_id: TenantId, context: SessionContext
    ) -> Tenant:
        """Reactivate a tenant; resuming an active tenant changes nothing."""
        return await self._toggle(
            actor_id, tenant_id, context, Action.RESUME_TENANT, "resume"
        )

    async def delete_tenant(
        self, actor_id: UserId, tenant_id: TenantId, context: SessionContext
    ) -> Tenant:
        """Soft-delete a tenant. The row and its slug are kept."""
        return await self._toggle(
            actor_id, tenant_id, context, Action.DELETE_TENANT, "delete"
        )

    async def get_tenant(self, actor_id: UserId, tenant_id: TenantId) -> Tenant:
        """Fetch a tenant the actor may view.

        Raises:
            TenantNotFoundError: If the tenant does not exist or is deleted
            ForbiddenError: If the tenant is outside the actor's reach
        """
        async with self._session.begin():
            actor = await load_actor(self._users, actor_id)
            tenant = await require_tenant(self._tenants, tenant_id)
            evaluate(
                actor, Action.VIEW_TENANT, ResourceTarget(ResourceKind.TENANT, tenant.id)
            ).raise_if_denied()
            return tenant

    async def list_tenants(
        self, actor_id: UserId, include_deleted: bool = False
    ) -> list[Tenant]:
        """List tenants. Platform staff only."""
        async with self._session.begin():
            actor = await load_actor(self._users, actor_id)
            evaluate(
                actor, Action.CREATE_TENANT, ResourceTarget(ResourceKind.TENANT, None)
            ).raise_if_denied()
            return await self._tenants.list_all(include_deleted=include_deleted)

    async def _toggle(
        self,
        actor_id: UserId,
        tenant_id: TenantId,
        context: SessionContext,
        action: Action,
        operation: str,
    ) -> Tenant:
        now = self._clock.now()
        try:
            async with self._session.begin():
                actor = await load_actor(self._users, actor_id)
                tenant = await require_tenant(self._tenants, tenant_id, for_update=True)
                evaluate(
                    actor, action, ResourceTarget(ResourceKind.TENANT, tenant.id)
                ).raise_if_denied()

                before = tenant.snapshot()
                if operation == "suspend":
                    changed = tenant.suspend()
                    audit_action = AuditAction.TENANT_SUSPENDED
                elif operation == "resume":
                    changed = tenant.resume()
                    audit_action = AuditAction.TENANT_RESUMED
                else:
                    changed = tenant.soft_delete(now)
                    audit_action = AuditAction.TENANT_DELETED

                if changed:
                    await self._tenants.save(tenant)
                    await self._record(actor, tenant, audit_action, before, now, context)
        except AccessError as e:
            self._probe.tenant_operation_rejected(operation, e.code, tenant_id.value)
            raise

        if changed:
            self._probe.tenant_updated(tenant.id.value, operation)
        return tenant

    async def _record(
        self,
        actor: Actor,
        tenant: Tenant,
        action: AuditAction,
        before: dict[str, Any],
        now: datetime,
        context: SessionContext,
    ) -> None:
        entry = (
            self._audit_options.builder(now)
            .for_actor(actor.as_audit_actor())
            .on("tenant", tenant.id)
            .in_tenant(tenant.id)
            .action(action)
            .changes_from(before, tenant.snapshot())
            .with_session(context)
            .build()
        )
        await self._audit.record(entry)
