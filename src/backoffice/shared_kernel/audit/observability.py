"""Domain probe for audit trail writes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AuditTrailProbe(Protocol):
    """Domain probe for audit trail operations."""

    def entry_recorded(
        self,
        entry_id: int,
        action: str,
        subject_type: str,
        subject_id: str,
    ) -> None:
        """Record that an audit entry was appended."""
        ...

    def entry_write_failed(self, action: str, error: str) -> None:
        """Record that an audit entry could not be appended."""
        ...

    def with_context(self, context: ObservationContext) -> AuditTrailProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAuditTrailProbe:
    """Default implementation of AuditTrailProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultAuditTrailProbe:
        """Create a new probe with observation context bound."""
        return DefaultAuditTrailProbe(logger=self._logger, context=context)

    def entry_recorded(
        self,
        entry_id: int,
        action: str,
        subject_type: str,
        subject_id: str,
    ) -> None:
        """Record that an audit entry was appended."""
        self._logger.debug(
            "audit_entry_recorded",
            entry_id=entry_id,
            action=action,
            subject_type=subject_type,
            subject_id=subject_id,
            **self._get_context_kwargs(),
        )

    def entry_write_failed(self, action: str, error: str) -> None:
        """Record that an audit entry could not be appended."""
        self._logger.error(
            "audit_entry_write_failed",
            action=action,
            error=error,
            **self._get_context_kwargs(),
        )
