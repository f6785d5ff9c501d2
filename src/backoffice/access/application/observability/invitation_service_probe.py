"""Protocol for invitation service observability.

Defines the interface for domain probes that capture application-level
events of the invitation lifecycle. Tokens never reach a probe.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from access.application.observability.base import StructlogProbe

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class InvitationServiceProbe(Protocol):
    """Domain probe for invitation lifecycle operations."""

    def invitation_created(
        self,
        invitation_id: str,
        tenant_id: str | None,
        role: str,
        seats_available: int | None,
    ) -> None:
        """Record that an invitation was created and sent."""
        ...

    def invitation_resent(
        self, invitation_id: str, reopened: bool, send_count: int
    ) -> None:
        """Record that an invitation was sent again."""
        ...

    def resend_throttled(self, invitation_id: str, seconds_left: int) -> None:
        """Record that a resend was refused by the cooldown."""
        ...

    def invitation_cancelled(self, invitation_id: str, changed: bool) -> None:
        """Record a cancellation request and whether it changed state."""
        ...

    def invitation_accepted(
        self, invitation_id: str, user_id: str, tenant_id: str | None
    ) -> None:
        """Record that an invitation was redeemed."""
        ...

    def invitations_expired(self, count: int, dry_run: bool) -> None:
        """Record a sweep of stale invitations."""
        ...

    def invitation_operation_rejected(
        self, operation: str, code: str, invitation_id: str | None = None
    ) -> None:
        """Record that an operation was refused with an Access error."""
        ...

    def with_context(self, context: ObservationContext) -> InvitationServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultInvitationServiceProbe(StructlogProbe):
    """Default implementation of InvitationServiceProbe using structlog."""

    def invitation_created(
        self,
        invitation_id: str,
        tenant_id: str | None,
        role: str,
        seats_available: int | None,
    ) -> None:
        """Record that an invitation was created and sent."""
        self._logger.info(
            "invitation_created",
            invitation_id=invitation_id,
            tenant_id=tenant_id,
            role=role,
            seats_available=seats_available,
            **self._get_context_kwargs(),
        )

    def invitation_resent(
        self, invitation_id: str, reopened: bool, send_count: int
    ) -> None:
        """Record that an invitation was sent again."""
        self._logger.info(
            "invitation_resent",
            invitation_id=invitation_id,
            reopened=reopened,
            send_count=send_count,
            **self._get_context_kwargs(),
        )

    def resend_throttled(self, invitation_id: str, seconds_left: int) -> None:
        """Record that a resend was refused by the cooldown."""
        self._logger.info(
            "invitation_resend_throttled",
            invitation_id=invitation_id,
            seconds_left=seconds_left,
            **self._get_context_kwargs(),
        )

    def invitation_cancelled(self, invitation_id: str, changed: bool) -> None:
        """Record a cancellation request and whether it changed state."""
        self._logger.info(
            "invitation_cancelled",
            invitation_id=invitation_id,
            changed=changed,
            **self._get_context_kwargs(),
        )

    def invitation_accepted(
        self, invitation_id: str, user_id: str, tenant_id: str | None
    ) -> None:
        """Record that an invitation was redeemed."""
        self._logger.info(
            "invitation_accepted",
            invitation_id=invitation_id,
            user_id=user_id,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def invitations_expired(self, count: int, dry_run: bool) -> None:
        """Record a sweep of stale invitations."""
        self._logger.info(
            "invitations_expired",
            count=count,
            dry_run=dry_run,
            **self._get_context_kwargs(),
        )

    def invitation_operation_rejected(
        self, operation: str, code: str, invitation_id: str | None = None
    ) -> None:
        """Record that an operation was refused with an Access error."""
        self._logger.warning(
            "invitation_operation_rejected",
            operation=operation,
            code=code,
            invitation_id=invitation_id,
            **self._get_context_kwargs(),
        )
