"""Role catalog.

The role set is closed: five roles with fixed ids, one platform-scoped and
four tenant-scoped. Editors and viewers share the lowest rank and never
manage anyone.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType

from access.domain.exceptions import UnknownRoleError


class RoleScope(StrEnum):
    """Where a role applies."""

    PLATFORM = "platform"
    TENANT = "tenant"


class RoleSlug(StrEnum):
    """Stable identifiers of the catalog roles."""

    PLATFORM_SUPER_ADMIN = "platform_super_admin"
    TENANT_OWNER = "tenant_owner"
    TENANT_ADMIN = "tenant_admin"
    TENANT_EDITOR = "tenant_editor"
    TENANT_VIEWER = "tenant_viewer"


@dataclass(frozen=True)
class Role:
    """A catalog entry.

    Attributes:
        id: Persisted role id (1..5)
        slug: Stable slug
        name: Display name
        scope: PLATFORM or TENANT
        rank: Position in the hierarchy, higher manages lower
    """

    id: int
    slug: RoleSlug
    name: str
    scope: RoleScope
    rank: int


ROLE_CATALOG: tuple[Role, ...] = (
    Role(1, RoleSlug.PLATFORM_SUPER_ADMIN, "Platform Super Admin", RoleScope.PLATFORM, 4),
    Role(2, RoleSlug.TENANT_OWNER, "Owner", RoleScope.TENANT, 3),
    Role(3, RoleSlug.TENANT_ADMIN, "Admin", RoleScope.TENANT, 2),
    Role(4, RoleSlug.TENANT_EDITOR, "Editor", RoleScope.TENANT, 1),
    Role(5, RoleSlug.TENANT_VIEWER, "Viewer", RoleScope.TENANT, 1),
)

_BY_SLUG = MappingProxyType({role.slug: role for role in ROLE_CATALOG})
_BY_ID = MappingProxyType({role.id: role for role in ROLE_CATALOG})

TENANT_MANAGER_ROLES = frozenset({RoleSlug.TENANT_OWNER, RoleSlug.TENANT_ADMIN})


def get_role(key: RoleSlug | str | int) -> Role:
    """Look up a catalog role by slug or id.

    Raises:
        UnknownRoleError: If no catalog role matches
    """
    if isinstance(key, int) and not isinstance(key, bool):
        role = _BY_ID.get(key)
    else:
        try:
            role = _BY_SLUG.get(RoleSlug(key))
        except ValueError:
            role = None
    if role is None:
        raise UnknownRoleError(key)
    return role


def scope_of(role: RoleSlug | str) -> RoleScope:
    """Return the scope a role applies to."""
    return get_role(role).scope


def rank(role: RoleSlug | str) -> int:
    """Return the hierarchy rank of a role."""
    return get_role(role).rank


def is_platform_super_admin(role: RoleSlug | str) -> bool:
    """Check whether a role is the platform super admin."""
    return get_role(role).slug == RoleSlug.PLATFORM_SUPER_ADMIN


def is_tenant_manager(role: RoleSlug | str) -> bool:
    """Check whether a role may manage users and resources of its tenant."""
    return get_role(role).slug in TENANT_MANAGER_ROLES
