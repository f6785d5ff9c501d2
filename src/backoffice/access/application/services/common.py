"""Lookups shared by the Access application services.

All helpers run inside the caller's transaction.
"""

from __future__ import annotations

from access.domain.aggregates import Tenant, User
from access.domain.policy import Actor
from access.domain.seats import SeatUsage
from access.domain.value_objects import TenantId, UserId
from access.ports.exceptions import TenantNotFoundError, UserNotFoundError
from access.ports.repositories import ITenantRepository, IUserRepository


async def load_actor(users: IUserRepository, actor_id: UserId) -> Actor:
    """Snapshot the acting user.

    Raises:
        UserNotFoundError: If the actor does not exist
    """
    user = await users.get_by_id(actor_id)
    if user is None:
        raise UserNotFoundError("Acting user not found.")
    return Actor.from_user(user)


async def require_user(
    users: IUserRepository, user_id: UserId, for_update: bool = False
) -> User:
    """Fetch a user or fail.

    Raises:
        UserNotFoundError: If the user does not exist
    """
    user = await users.get_by_id(user_id, for_update=for_update)
    if user is None:
        raise UserNotFoundError()
    return user


async def require_tenant(
    tenants: ITenantRepository, tenant_id: TenantId, for_update: bool = False
) -> Tenant:
    """Fetch a live (not deleted) tenant or fail.

    Raises:
        TenantNotFoundError: If the tenant does not exist or is deleted
    """
    tenant = await tenants.get_by_id(tenant_id, for_update=for_update)
    if tenant is None or tenant.is_deleted:
        raise TenantNotFoundError()
    return tenant


async def seat_usage_of(users: IUserRepository, tenant: Tenant) -> SeatUsage:
    """Current seat usage of a tenant."""
    used = await users.count_active(tenant.id)
    return SeatUsage(used=used, limit=tenant.seat_limit)
