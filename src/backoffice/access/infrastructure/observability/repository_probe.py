"""Domain probes for Access repository operations.

Following Domain-Oriented Observability patterns, these probes capture
domain-significant events of the persistence layer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class _StructlogProbe:
    """Shared structlog wiring for the default probes."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext):
        """Create a new probe with observation context bound."""
        return type(self)(logger=self._logger, context=context)


class TenantRepositoryProbe(Protocol):
    """Domain probe for tenant repository operations."""

    def tenant_saved(self, tenant_id: str) -> None:
        """Record that a tenant was saved."""
        ...

    def tenant_retrieved(self, tenant_id: str, locked: bool) -> None:
        """Record that a tenant was retrieved."""
        ...

    def duplicate_tenant_slug(self, slug: str) -> None:
        """Record that a duplicate tenant slug was rejected."""
        ...

    def with_context(self, context: ObservationContext) -> TenantRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantRepositoryProbe(_StructlogProbe):
    """Default implementation of TenantRepositoryProbe using structlog."""

    def tenant_saved(self, tenant_id: str) -> None:
        """Record that a tenant was saved."""
        self._logger.info(
            "tenant_saved", tenant_id=tenant_id, **self._get_context_kwargs()
        )

    def tenant_retrieved(self, tenant_id: str, locked: bool) -> None:
        """Record that a tenant was retrieved."""
        self._logger.debug(
            "tenant_retrieved",
            tenant_id=tenant_id,
            locked=locked,
            **self._get_context_kwargs(),
        )

    def duplicate_tenant_slug(self, slug: str) -> None:
        """Record that a duplicate tenant slug was rejected."""
        self._logger.warning(
            "duplicate_tenant_slug", slug=slug, **self._get_context_kwargs()
        )


class UserRepositoryProbe(Protocol):
    """Domain probe for user repository operations."""

    def user_saved(self, user_id: str, tenant_id: str | None) -> None:
        """Record that a user was saved."""
        ...

    def duplicate_email(self, user_id: str) -> None:
        """Record that a save was rejected for an email already in use."""
        ...

    def with_context(self, context: ObservationContext) -> UserRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultUserRepositoryProbe(_StructlogProbe):
    """Default implementation of UserRepositoryProbe using structlog."""

    def user_saved(self, user_id: str, tenant_id: str | None) -> None:
        """Record that a user was saved."""
        self._logger.info(
            "user_saved",
            user_id=user_id,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def duplicate_email(self, user_id: str) -> None:
        """Record that a save was rejected for an email already in use."""
        # The address itself is personal data; only the id is logged.
        self._logger.warning(
            "duplicate_user_email", user_id=user_id, **self._get_context_kwargs()
        )


class InvitationRepositoryProbe(Protocol):
    """Domain probe for invitation repository operations."""

    def invitation_saved(self, invitation_id: str, status: str) -> None:
        """Record that an invitation was saved."""
        ...

    def acceptance_conflict(self, invitation_id: str) -> None:
        """Record that a conditional acceptance found the row already changed."""
        ...

    def with_context(self, context: ObservationContext) -> InvitationRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultInvitationRepositoryProbe(_StructlogProbe):
    """Default implementation of InvitationRepositoryProbe using structlog."""

    def invitation_saved(self, invitation_id: str, status: str) -> None:
        """Record that an invitation was saved."""
        self._logger.info(
            "invitation_saved",
            invitation_id=invitation_id,
            status=status,
            **self._get_context_kwargs(),
        )

    def acceptance_conflict(self, invitation_id: str) -> None:
        """Record that a conditional acceptance found the row already changed."""
        self._logger.warning(
            "invitation_acceptance_conflict",
            invitation_id=invitation_id,
            **self._get_context_kwargs(),
        )
