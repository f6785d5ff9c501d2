"""Protocol for impersonation observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from access.application.observability.base import StructlogProbe

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ImpersonationProbe(Protocol):
    """Domain probe for impersonation sessions."""

    def impersonation_started(self, impersonator_id: str, target_id: str) -> None:
        """Record that an actor started impersonating a user."""
        ...

    def impersonation_ended(self, impersonator_id: str, target_id: str) -> None:
        """Record that an impersonation session ended."""
        ...

    def impersonation_rejected(self, actor_id: str, code: str) -> None:
        """Record that an impersonation request was refused."""
        ...

    def with_context(self, context: ObservationContext) -> ImpersonationProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultImpersonationProbe(StructlogProbe):
    """Default implementation of ImpersonationProbe using structlog."""

    def impersonation_started(self, impersonator_id: str, target_id: str) -> None:
        """Record that an actor started impersonating a user."""
        self._logger.warning(
            "impersonation_started",
            impersonator_id=impersonator_id,
            target_id=target_id,
            **self._get_context_kwargs(),
        )

    def impersonation_ended(self, impersonator_id: str, target_id: str) -> None:
        """Record that an impersonation session ended."""
        self._logger.info(
            "impersonation_ended",
            impersonator_id=impersonator_id,
            target_id=target_id,
            **self._get_context_kwargs(),
        )

    def impersonation_rejected(self, actor_id: str, code: str) -> None:
        """Record that an impersonation request was refused."""
        self._logger.warning(
            "impersonation_rejected",
            actor_id=actor_id,
            code=code,
            **self._get_context_kwargs(),
        )
