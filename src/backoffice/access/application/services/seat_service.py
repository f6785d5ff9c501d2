"""Seat application service for the Access bounded context.

Reports seat usage, changes tenant seat limits and files upgrade requests
from tenant managers.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from access.application.observability import (
    DefaultTenantServiceProbe,
    TenantServiceProbe,
)
from access.application.services.common import load_actor, require_tenant, seat_usage_of
from access.domain.aggregates import Tenant
from access.domain.policy import Action, ResourceKind, ResourceTarget, evaluate
from access.domain.seats import SeatUpgradeRequest, SeatUsage
from access.domain.value_objects import TenantId, UserId
from access.ports.exceptions import AccessError, NoChangeError
from access.ports.repositories import ITenantRepository, IUserRepository
from shared_kernel.audit import AuditAction, AuditOptions, IAuditTrail
from shared_kernel.clock import Clock, SystemClock
from shared_kernel.session import SessionContext


class SeatService:
    """Application service for seat accounting."""

    def __init__(
        self,
        tenant_repository: ITenantRepository,
        user_repository: IUserRepository,
        audit_trail: IAuditTrail,
        session: AsyncSession,
        clock: Clock | None = None,
        max_seat_limit: int = 10000,
        audit_options: AuditOptions | None = None,
        probe: TenantServiceProbe | None = None,
    ):
        self._tenants = tenant_repository
        self._users = user_repository
        self._audit = audit_trail
        self._session = session
        self._clock = clock or SystemClock()
        self._max_seat_limit = max_seat_limit
        self._audit_options = audit_options or AuditOptions()
        self._probe = probe or DefaultTenantServiceProbe()

    async def seat_usage(self, tenant_id: TenantId) -> SeatUsage:
        """Current seat usage of a tenant.

        Raises:
            TenantNotFoundError: If the tenant does not exist or is deleted
        """
        async with self._session.begin():
            tenant = await require_tenant(self._tenants, tenant_id)
            return await seat_usage_of(self._users, tenant)

    async def seats_available(self, tenant_id: TenantId) -> int:
        """Free seats of a tenant, never negative."""
        usage = await self.seat_usage(tenant_id)
        return usage.available

    async def update_seat_limit(
        self,
        actor_id: UserId,
        tenant_id: TenantId,
        new_limit: int,
        context: SessionContext,
    ) -> Tenant:
        """Change a tenant's seat limit.

        The tenant row is locked while usage is counted, so the limit can
        never drop below the active users of a concurrent acceptance.

        Raises:
            TenantNotFoundError: If the tenant does not exist or is deleted
            ForbiddenError: If the actor is not platform staff
            InvalidSeatLimitError: If new_limit is out of range
            SeatLimitBelowUsageError: If new_limit is below current usage
            NoChangeError: If new_limit equals the current limit
        """
        now = self._clock.now()
        try:
            async with self._session.begin():
                actor = await load_actor(self._users, actor_id)
                tenant = await require_tenant(self._tenants, tenant_id, for_update=True)
                evaluate(
                    actor,
                    Action.UPDATE_SEAT_LIMIT,
                    ResourceTarget(ResourceKind.TENANT, tenant.id),
                ).raise_if_denied()

                if new_limit == tenant.seat_limit:
                    raise NoChangeError("The seat limit is unchanged.")
                usage = await seat_usage_of(self._users, tenant)
                usage.enforce_limit_on_increase(new_limit, self._max_seat_limit)

                previous = tenant.change_seat_limit(new_limit)
                await self._tenants.save(tenant)

                entry = (
                    self._audit_options.builder(now)
                    .for_actor(actor.as_audit_actor())
                    .on("tenant", tenant.id)
                    .in_tenant(tenant.id)
                    .action(AuditAction.TENANT_SEATS_UPDATED)
                    .changes({"seat_limit": {"old": previous, "new": new_limit}})
                    .meta(seats_used=usage.used)
                    .with_session(context)
                    .build()
                )
                await self._audit.record(entry)
        except AccessError as e:
            self._probe.tenant_operation_rejected("update_seat_limit", e.code, tenant_id.value)
            raise

        self._probe.seat_limit_updated(tenant.id.value, previous, new_limit)
        return tenant

    async def seat_overview(self, actor_id: UserId, tenant_id: TenantId) -> SeatUsage:
        """Seat usage as shown to a tenant manager.

        Raises:
            TenantNotFoundError: If the tenant does not exist or is deleted
            ForbiddenError: If the actor does not manage the tenant
        """
        try:
            async with self._session.begin():
                actor = await load_actor(self._users, actor_id)
                tenant = await require_tenant(self._tenants, tenant_id)
                evaluate(
                    actor, Action.MANAGE_SEATS, ResourceTarget(ResourceKind.TENANT, tenant.id)
                ).raise_if_denied()
                return await seat_usage_of(self._users, tenant)
        except AccessError as e:
            self._probe.tenant_operation_rejected("seat_overview", e.code, tenant_id.value)
            raise

    async def request_seat_upgrade(
        self,
        actor_id: UserId,
        tenant_id: TenantId,
        desired_limit: int,
        context: SessionContext,
        note: str | None = None,
    ) -> SeatUpgradeRequest:
        """File a request for a higher seat limit.

        Nothing changes on the tenant; the request is recorded in the audit
        trail for platform staff to act on with update_seat_limit.

        Raises:
            TenantNotFoundError: If the tenant does not exist or is deleted
            ForbiddenError: If the actor does not manage the tenant
            InvalidSeatLimitError: If desired_limit is out of range
            SeatLimitBelowUsageError: If desired_limit does not exceed usage
        """
        now = self._clock.now()
        try:
            async with self._session.begin():
                actor = await load_actor(self._users, actor_id)
                tenant = await require_tenant(self._tenants, tenant_id)
                evaluate(
                    actor, Action.MANAGE_SEATS, ResourceTarget(ResourceKind.TENANT, tenant.id)
                ).raise_if_denied()

                usage = await seat_usage_of(self._users, tenant)
                request = usage.request_upgrade(desired_limit, self._max_seat_limit, note)

                entry = (
                    self._audit_options.builder(now)
                    .for_actor(actor.as_audit_actor())
                    .on("tenant", tenant.id)
                    .in_tenant(tenant.id)
                    .action(AuditAction.TENANT_SEATS_UPGRADE_REQUESTED)
                    .meta(
                        from_limit=request.current_limit,
                        to_requested=request.requested_limit,
                        used=request.used,
                        note=request.note,
                    )
                    .with_session(context)
                    .build()
                )
                await self._audit.record(entry)
        except AccessError as e:
            self._probe.tenant_operation_rejected(
                "request_seat_upgrade", e.code, tenant_id.value
            )
            raise

        self._probe.seat_upgrade_requested(
            tenant.id.value, request.current_limit, request.requested_limit
        )
        return request
