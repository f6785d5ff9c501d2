"""Invitation aggregate for the Access context."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from access.domain.aggregates.user import normalize_email
from access.domain.exceptions import (
    CooldownActiveError,
    InvalidOrExpiredInvitationError,
    InvitationAlreadyAcceptedError,
)
from access.domain.role_assignment import check_scope
from access.domain.roles import RoleSlug
from access.domain.value_objects import (
    InvitationId,
    InvitationStatus,
    TenantId,
    UserId,
)


@dataclass
class Invitation:
    """Invitation aggregate: a single-use offer to join a tenant with a role.

    State machine:
        pending -> accepted   (accept; terminal)
        pending -> cancelled  (cancel; terminal until reopened by resend)
        pending -> expired    (sweep job; also derived from expires_at)
        cancelled/expired -> pending (resend reopens with a new token)

    Business rules:
    - The token is single use; reopening replaces it
    - A pending invitation past expires_at is expired even if not swept yet
    - Resends are spaced by a cooldown; a rejected resend changes nothing
    """

    id: InvitationId
    email: str
    role: RoleSlug
    tenant_id: TenantId | None
    token: str
    expires_at: datetime | None
    invited_by: UserId | None
    status: InvitationStatus = InvitationStatus.PENDING
    last_sent_at: datetime | None = None
    send_count: int = 0
    created_at: datetime | None = field(default=None, compare=False)

    @classmethod
    def create(
        cls,
        email: str,
        role: RoleSlug,
        tenant_id: TenantId | None,
        invited_by: UserId | None,
        token: str,
        now: datetime,
        ttl: timedelta,
    ) -> Invitation:
        """Factory method for creating a pending invitation.

        Raises:
            ScopeMismatchError: If role and tenant binding disagree
            ValueError: If the email is malformed
        """
        check_scope(role, tenant_id)
        return cls(
            id=InvitationId.generate(),
            email=normalize_email(email),
            role=role,
            tenant_id=tenant_id,
            token=token,
            expires_at=now + ttl,
            invited_by=invited_by,
            status=InvitationStatus.PENDING,
            send_count=0,
            created_at=now,
        )

    def is_expired(self, now: datetime) -> bool:
        """Whether the invitation is expired, stored or derived."""
        if self.status == InvitationStatus.EXPIRED:
            return True
        return self.expires_at is not None and self.expires_at <= now

    def is_acceptable(self, now: datetime) -> bool:
        """Whether the token can still be redeemed."""
        return self.status == InvitationStatus.PENDING and not self.is_expired(now)

    def effective_status(self, now: datetime) -> InvitationStatus:
        """Stored status with derived expiry applied."""
        if self.status == InvitationStatus.PENDING and self.is_expired(now):
            return InvitationStatus.EXPIRED
        return self.status

    def cooldown_remaining(self, now: datetime, cooldown: timedelta) -> timedelta:
        """Time left before another send is allowed (zero when allowed)."""
        if self.last_sent_at is None:
            return timedelta(0)
        return max(timedelta(0), self.last_sent_at + cooldown - now)

    def prepare_resend(
        self,
        now: datetime,
        ttl: timedelta,
        cooldown: timedelta,
        new_token: str,
    ) -> bool:
        """Apply the state changes that precede a resend.

        Reopens cancelled or expired invitations with ``new_token``; live
        ones keep their token. The expiry is always pushed to now + ttl.

        Returns:
            True if the invitation was reopened

        Raises:
            InvitationAlreadyAcceptedError: If already accepted
            CooldownActiveError: If the last send is within the cooldown
        """
        if self.status == InvitationStatus.ACCEPTED:
            raise InvitationAlreadyAcceptedError()

        remaining = self.cooldown_remaining(now, cooldown)
        if remaining > timedelta(0):
            raise CooldownActiveError(
                seconds_left=math.ceil(remaining.total_seconds())
            )

        reopened = self.status != InvitationStatus.PENDING or self.is_expired(now)
        if reopened:
            self.token = new_token
            self.status = InvitationStatus.PENDING
        self.expires_at = now + ttl
        return reopened

    def record_sent(self, now: datetime) -> None:
        """Record a successful dispatch."""
        self.last_sent_at = now
        self.send_count += 1

    def cancel(self, now: datetime) -> bool:
        """Cancel the invitation.

        Accepted and cancelled invitations are left untouched.

        Returns:
            True if the status changed
        """
        if self.status in (InvitationStatus.ACCEPTED, InvitationStatus.CANCELLED):
            return False
        self.status = InvitationStatus.CANCELLED
        self.expires_at = now
        return True

    def accept(self, now: datetime) -> None:
        """Consume the invitation.

        Raises:
            InvalidOrExpiredInvitationError: If it is not pending or expired
        """
        if not self.is_acceptable(now):
            raise InvalidOrExpiredInvitationError()
        self.status = InvitationStatus.ACCEPTED
        self.expires_at = now

    def expire(self, now: datetime) -> bool:
        """Materialize expiry for a pending invitation past expires_at.

        Returns:
            True if the status changed
        """
        if self.status != InvitationStatus.PENDING:
            return False
        if self.expires_at is None or self.expires_at > now:
            return False
        self.status = InvitationStatus.EXPIRED
        return True

    def snapshot(self) -> dict[str, Any]:
        """Field values used for audit diffs; the token is never included."""
        return {
            "email": self.email,
            "role": self.role.value,
            "status": self.status.value,
            "expires_at": self.expires_at,
            "last_sent_at": self.last_sent_at,
            "send_count": self.send_count,
        }
