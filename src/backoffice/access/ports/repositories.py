"""Repository protocols (ports) for the Access bounded context.

Repositories share the caller's session; every method runs inside the
transaction the application service opened. Methods taking ``for_update``
lock the returned row until that transaction ends.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from access.domain.aggregates import Invitation, Tenant, User
from access.domain.value_objects import (
    InvitationId,
    InvitationStatus,
    TenantId,
    UserId,
)


@runtime_checkable
class ITenantRepository(Protocol):
    """Repository for Tenant aggregate persistence."""

    async def save(self, tenant: Tenant) -> None:
        """Persist a tenant (insert or update).

        Raises:
            DuplicateTenantSlugError: If the slug is already taken
        """
        ...

    async def get_by_id(
        self, tenant_id: TenantId, for_update: bool = False
    ) -> Tenant | None:
        """Retrieve a tenant, including soft-deleted ones.

        Args:
            tenant_id: The tenant to fetch
            for_update: Lock the row (serializes seat and owner checks)
        """
        ...

    async def get_by_slug(self, slug: str) -> Tenant | None:
        """Retrieve a tenant by slug."""
        ...

    async def list_all(self, include_deleted: bool = False) -> list[Tenant]:
        """List tenants ordered by name."""
        ...


@runtime_checkable
class IUserRepository(Protocol):
    """Repository for User aggregate persistence."""

    async def save(self, user: User) -> None:
        """Persist a user (insert or update).

        Raises:
            EmailAlreadyInUseError: If the email belongs to another user
        """
        ...

    async def get_by_id(self, user_id: UserId, for_update: bool = False) -> User | None:
        """Retrieve a user by id."""
        ...

    async def get_by_email(self, email: str) -> User | None:
        """Retrieve a user by normalized email."""
        ...

    async def count_active(self, tenant_id: TenantId) -> int:
        """Count ACTIVE users of a tenant (seats in use)."""
        ...

    async def count_owners(
        self, tenant_id: TenantId, exclude: UserId | None = None
    ) -> int:
        """Count tenant owners of a tenant regardless of status.

        Args:
            tenant_id: The tenant
            exclude: A user not to count (the one being changed)
        """
        ...

    async def list_by_tenant(self, tenant_id: TenantId | None) -> list[User]:
        """List users of a tenant, or platform staff when tenant_id is None."""
        ...


@runtime_checkable
class IInvitationRepository(Protocol):
    """Repository for Invitation aggregate persistence."""

    async def save(self, invitation: Invitation) -> None:
        """Persist an invitation (insert or update)."""
        ...

    async def get_by_id(
        self, invitation_id: InvitationId, for_update: bool = False
    ) -> Invitation | None:
        """Retrieve an invitation by id."""
        ...

    async def get_acceptable_by_token(
        self, token: str, now: datetime
    ) -> Invitation | None:
        """Retrieve a pending, unexpired invitation by token.

        Returns None for unknown, used, cancelled or expired tokens.
        """
        ...

    async def has_live_invitation(
        self,
        tenant_id: TenantId | None,
        email: str,
        now: datetime,
        exclude: InvitationId | None = None,
    ) -> bool:
        """Whether a pending, unexpired invitation exists for tenant + email.

        ``exclude`` leaves one invitation out of the check (the one being
        reopened).
        """
        ...

    async def mark_accepted_if_pending(
        self, invitation_id: InvitationId, now: datetime
    ) -> bool:
        """Atomically flip a pending invitation to accepted.

        Issues a conditional update so that of two concurrent acceptances
        only one observes True.

        Returns:
            True if this call performed the transition
        """
        ...

    async def list_expired_pending(
        self, now: datetime, for_update: bool = False
    ) -> list[Invitation]:
        """List pending invitations whose expires_at is at or before now."""
        ...

    async def list_invitations(
        self,
        tenant_id: TenantId | None,
        status: InvitationStatus | None,
        now: datetime,
        all_tenants: bool = False,
    ) -> list[Invitation]:
        """List invitations, newest first.

        Args:
            tenant_id: Tenant to list (None selects platform invitations)
            status: Effective status filter; PENDING excludes expired rows and
                EXPIRED includes pending rows past their expiry
            now: Instant used to derive expiry
            all_tenants: Ignore tenant_id and list every tenant
        """
        ...
