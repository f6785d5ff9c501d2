"""Policy evaluator.

Decides whether an actor may perform an action on a user or a resource.
Rules are evaluated in a fixed order and the first match wins:

1. platform super admin: allow (the only universal override)
2. inactive actor: deny
3. role/status change or impersonation of oneself: deny
4. target user is a platform super admin: deny
5. target outside the actor's tenant: deny
6. platform-only action: deny
7. role floor: owners manage anyone in their tenant, admins manage editors
   and viewers, editors and viewers only view

The evaluator is a pure function of its inputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from access.domain.exceptions import (
    CrossTenantForbiddenError,
    ForbiddenError,
    PlatformAdminShieldedError,
    SelfChangeForbiddenError,
)
from access.domain.roles import (
    RoleSlug,
    is_platform_super_admin,
    is_tenant_manager,
    rank,
)
from access.domain.value_objects import TenantId, UserId, UserStatus
from shared_kernel.audit.value_objects import AuditActor

if TYPE_CHECKING:
    from access.domain.aggregates import User


class Action(StrEnum):
    """Actions subject to authorization."""

    CREATE_USER = "create_user"
    UPDATE_ROLE = "update_role"
    UPDATE_STATUS = "update_status"
    IMPERSONATE = "impersonate"
    VIEW_THEME = "view_theme"
    CREATE_THEME = "create_theme"
    UPDATE_THEME = "update_theme"
    DELETE_THEME = "delete_theme"
    VIEW_TENANT = "view_tenant"
    VIEW_USERS = "view_users"
    UPDATE_TENANT = "update_tenant"
    CREATE_TENANT = "create_tenant"
    SUSPEND_TENANT = "suspend_tenant"
    RESUME_TENANT = "resume_tenant"
    DELETE_TENANT = "delete_tenant"
    UPDATE_SEAT_LIMIT = "update_seat_limit"
    MANAGE_SEATS = "manage_seats"
    MANAGE_INVITATION = "manage_invitation"


SELF_PROTECTED_ACTIONS = frozenset(
    {Action.UPDATE_ROLE, Action.UPDATE_STATUS, Action.IMPERSONATE}
)

PLATFORM_ONLY_ACTIONS = frozenset(
    {
        Action.CREATE_TENANT,
        Action.SUSPEND_TENANT,
        Action.RESUME_TENANT,
        Action.DELETE_TENANT,
        Action.UPDATE_SEAT_LIMIT,
    }
)

VIEW_ACTIONS = frozenset({Action.VIEW_THEME, Action.VIEW_TENANT, Action.VIEW_USERS})


class ResourceKind(StrEnum):
    """Kinds of non-user resources the evaluator understands."""

    THEME = "theme"
    TENANT = "tenant"
    INVITATION = "invitation"


class DenyReason(StrEnum):
    """Why the evaluator denied an action."""

    ACTOR_INACTIVE = "actor_inactive"
    SELF_CHANGE_FORBIDDEN = "self_change_forbidden"
    PLATFORM_ADMIN_SHIELDED = "platform_admin_shielded"
    CROSS_TENANT_FORBIDDEN = "cross_tenant_forbidden"
    PLATFORM_ONLY = "platform_only"
    INSUFFICIENT_ROLE = "insufficient_role"


_DENY_MESSAGES: dict[DenyReason, str] = {
    DenyReason.ACTOR_INACTIVE: "Your account is not active.",
    DenyReason.SELF_CHANGE_FORBIDDEN: "You cannot perform this action on your own account.",
    DenyReason.PLATFORM_ADMIN_SHIELDED: "Platform administrators cannot be managed here.",
    DenyReason.CROSS_TENANT_FORBIDDEN: "The target belongs to another tenant.",
    DenyReason.PLATFORM_ONLY: "Only platform administrators may perform this action.",
    DenyReason.INSUFFICIENT_ROLE: "Your role does not allow this action.",
}

_DENY_ERRORS: dict[DenyReason, type[ForbiddenError]] = {
    DenyReason.SELF_CHANGE_FORBIDDEN: SelfChangeForbiddenError,
    DenyReason.PLATFORM_ADMIN_SHIELDED: PlatformAdminShieldedError,
    DenyReason.CROSS_TENANT_FORBIDDEN: CrossTenantForbiddenError,
}


@dataclass(frozen=True)
class Actor:
    """Snapshot of the authenticated principal attempting an action."""

    id: UserId
    role: RoleSlug
    tenant_id: TenantId | None
    status: UserStatus = UserStatus.ACTIVE

    @classmethod
    def from_user(cls, user: User) -> Actor:
        """Snapshot a User aggregate as an actor."""
        return cls(
            id=user.id,
            role=user.role,
            tenant_id=user.tenant_id,
            status=user.status,
        )

    @property
    def is_platform_super_admin(self) -> bool:
        """Whether the actor holds the platform super admin role."""
        return is_platform_super_admin(self.role)

    def as_audit_actor(self) -> AuditActor:
        """Describe the actor for the audit trail."""
        return AuditActor(
            id=self.id.value,
            role=self.role.value,
            tenant_id=self.tenant_id.value if self.tenant_id else None,
        )


@dataclass(frozen=True)
class UserTarget:
    """Snapshot of a target user; ``id`` is None for a prospective user."""

    id: UserId | None
    role: RoleSlug
    tenant_id: TenantId | None

    @classmethod
    def from_user(cls, user: User) -> UserTarget:
        """Snapshot a User aggregate as a target."""
        return cls(id=user.id, role=user.role, tenant_id=user.tenant_id)


@dataclass(frozen=True)
class ResourceTarget:
    """Snapshot of a non-user resource and the tenant that owns it."""

    kind: ResourceKind
    tenant_id: TenantId | None


Target = UserTarget | ResourceTarget


@dataclass(frozen=True)
class PolicyDecision:
    """Outcome of an evaluation."""

    allowed: bool
    reason: DenyReason | None = None
    message: str | None = None

    @classmethod
    def allow(cls) -> PolicyDecision:
        """Create an allowing decision."""
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenyReason) -> PolicyDecision:
        """Create a denying decision with its display message."""
        return cls(allowed=False, reason=reason, message=_DENY_MESSAGES[reason])

    def to_error(self) -> ForbiddenError:
        """Build the exception matching a denial."""
        if self.allowed or self.reason is None:
            raise ValueError("Cannot build an error from an allowing decision")
        error_cls = _DENY_ERRORS.get(self.reason, ForbiddenError)
        return error_cls(reason=self.reason.value, message=self.message)

    def raise_if_denied(self) -> None:
        """Raise the matching ForbiddenError if the decision denies.

        Raises:
            ForbiddenError: Or a subclass naming the specific reason
        """
        if not self.allowed:
            raise self.to_error()


def _manages(actor_role: RoleSlug, target_role: RoleSlug) -> bool:
    if not is_tenant_manager(actor_role):
        return False
    if actor_role == RoleSlug.TENANT_OWNER:
        return True
    return rank(target_role) < rank(actor_role)


def evaluate(actor: Actor, action: Action, target: Target) -> PolicyDecision:
    """Decide whether ``actor`` may perform ``action`` on ``target``.

    Args:
        actor: The acting principal
        action: What the actor wants to do
        target: The user or resource affected

    Returns:
        An allowing decision, or a denial carrying its reason
    """
    if actor.is_platform_super_admin:
        return PolicyDecision.allow()

    if actor.status != UserStatus.ACTIVE:
        return PolicyDecision.deny(DenyReason.ACTOR_INACTIVE)

    if isinstance(target, UserTarget):
        if action in SELF_PROTECTED_ACTIONS and target.id == actor.id:
            return PolicyDecision.deny(DenyReason.SELF_CHANGE_FORBIDDEN)
        if is_platform_super_admin(target.role):
            return PolicyDecision.deny(DenyReason.PLATFORM_ADMIN_SHIELDED)

    if target.tenant_id != actor.tenant_id:
        return PolicyDecision.deny(DenyReason.CROSS_TENANT_FORBIDDEN)

    if action in PLATFORM_ONLY_ACTIONS:
        return PolicyDecision.deny(DenyReason.PLATFORM_ONLY)

    if isinstance(target, UserTarget):
        if _manages(actor.role, target.role):
            return PolicyDecision.allow()
        return PolicyDecision.deny(DenyReason.INSUFFICIENT_ROLE)

    if action in VIEW_ACTIONS or is_tenant_manager(actor.role):
        return PolicyDecision.allow()
    return PolicyDecision.deny(DenyReason.INSUFFICIENT_ROLE)

