"""Protocol for tenant and seat administration observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from access.application.observability.base import StructlogProbe

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantServiceProbe(Protocol):
    """Domain probe for tenant administration operations."""

    def tenant_created(self, tenant_id: str, slug: str, seat_limit: int) -> None:
        """Record that a tenant was created."""
        ...

    def tenant_updated(self, tenant_id: str, action: str) -> None:
        """Record that a tenant was changed (renamed, suspended, ...)."""
        ...

    def seat_limit_updated(self, tenant_id: str, old_limit: int, new_limit: int) -> None:
        """Record that a tenant's seat limit changed."""
        ...

    def seat_upgrade_requested(
        self, tenant_id: str, current_limit: int, requested_limit: int
    ) -> None:
        """Record that a tenant manager asked for more seats."""
        ...

    def tenant_operation_rejected(
        self, operation: str, code: str, tenant_id: str | None = None
    ) -> None:
        """Record that an operation was refused with an Access error."""
        ...

    def with_context(self, context: ObservationContext) -> TenantServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantServiceProbe(StructlogProbe):
    """Default implementation of TenantServiceProbe using structlog."""

    def tenant_created(self, tenant_id: str, slug: str, seat_limit: int) -> None:
        """Record that a tenant was created."""
        self._logger.info(
            "tenant_created",
            tenant_id=tenant_id,
            slug=slug,
            seat_limit=seat_limit,
            **self._get_context_kwargs(),
        )

    def tenant_updated(self, tenant_id: str, action: str) -> None:
        """Record that a tenant was changed (renamed, suspended, ...)."""
        self._logger.info(
            "tenant_updated",
            tenant_id=tenant_id,
            action=action,
            **self._get_context_kwargs(),
        )

    def seat_limit_updated(self, tenant_id: str, old_limit: int, new_limit: int) -> None:
        """Record that a tenant's seat limit changed."""
        self._logger.info(
            "seat_limit_updated",
            tenant_id=tenant_id,
            old_limit=old_limit,
            new_limit=new_limit,
            **self._get_context_kwargs(),
        )

    def seat_upgrade_requested(
        self, tenant_id: str, current_limit: int, requested_limit: int
    ) -> None:
        """Record that a tenant manager asked for more seats."""
        self._logger.info(
            "seat_upgrade_requested",
            tenant_id=tenant_id,
            current_limit=current_limit,
            requested_limit=requested_limit,
            **self._get_context_kwargs(),
        )

    def tenant_operation_rejected(
        self, operation: str, code: str, tenant_id: str | None = None
    ) -> None:
        """Record that an operation was refused with an Access error."""
        self._logger.warning(
            "tenant_operation_rejected",
            operation=operation,
            code=code,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )
