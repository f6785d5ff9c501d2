"""Role assignment guard.

Data invariants checked whenever a user's role is about to change, whoever
initiated it:

- tenantless users hold the platform role, tenant users hold tenant roles
- only a platform super admin grants the platform role, and only to a
  tenantless user
- tenant managers only grant roles they could manage
- a tenant never loses its last owner
"""

from __future__ import annotations

from access.domain.exceptions import (
    ForbiddenError,
    LastOwnerViolationError,
    PlatformRoleAssignmentError,
    ScopeMismatchError,
)
from access.domain.roles import (
    RoleScope,
    RoleSlug,
    is_platform_super_admin,
    rank,
    scope_of,
)
from access.domain.value_objects import TenantId


def check_scope(role: RoleSlug, tenant_id: TenantId | None) -> None:
    """Check that a role fits the user's tenant binding.

    Raises:
        ScopeMismatchError: If a tenantless user gets a tenant role or a
            tenant user gets the platform role
    """
    expected = RoleScope.PLATFORM if tenant_id is None else RoleScope.TENANT
    if scope_of(role) != expected:
        raise ScopeMismatchError(
            f"A {'platform' if tenant_id is None else 'tenant'} user cannot "
            f"hold the {role.value} role."
        )


def check_platform_grant(
    actor_role: RoleSlug,
    new_role: RoleSlug,
    target_tenant_id: TenantId | None,
) -> None:
    """Check the platform super admin grant rule.

    Raises:
        PlatformRoleAssignmentError: If the grant is not made by a platform
            super admin to a tenantless user
    """
    if not is_platform_super_admin(new_role):
        return
    if not is_platform_super_admin(actor_role) or target_tenant_id is not None:
        raise PlatformRoleAssignmentError()


def check_grant_ceiling(actor_role: RoleSlug, new_role: RoleSlug) -> None:
    """Check that the actor could manage a user holding the granted role.

    Owners grant any tenant role, admins grant editor and viewer only. The
    platform role is covered by check_platform_grant.

    Raises:
        ForbiddenError: If the role ranks too high for the actor
    """
    if is_platform_super_admin(actor_role) or is_platform_super_admin(new_role):
        return
    if actor_role == RoleSlug.TENANT_OWNER:
        return
    if actor_role == RoleSlug.TENANT_ADMIN and rank(new_role) < rank(actor_role):
        return
    raise ForbiddenError(
        reason="insufficient_role",
        message="Your role does not allow granting this role.",
    )


def check_last_owner(
    current_role: RoleSlug,
    new_role: RoleSlug,
    other_owner_count: int,
) -> None:
    """Check that removing an owner role leaves another owner behind.

    Args:
        current_role: Role the user holds now
        new_role: Role about to be assigned
        other_owner_count: Owners of the same tenant excluding this user

    Raises:
        LastOwnerViolationError: If the user is the tenant's last owner
    """
    if (
        current_role == RoleSlug.TENANT_OWNER
        and new_role != RoleSlug.TENANT_OWNER
        and other_owner_count == 0
    ):
        raise LastOwnerViolationError(
            "You cannot remove the last owner from this tenant."
        )


def guard_role_change(
    actor_role: RoleSlug,
    current_role: RoleSlug,
    new_role: RoleSlug,
    target_tenant_id: TenantId | None,
    other_owner_count: int,
) -> RoleSlug:
    """Run every assignment invariant in order.

    Returns:
        The prior role, for audit diffing
    """
    check_scope(new_role, target_tenant_id)
    check_platform_grant(actor_role, new_role, target_tenant_id)
    check_grant_ceiling(actor_role, new_role)
    check_last_owner(current_role, new_role, other_owner_count)
    return current_role
