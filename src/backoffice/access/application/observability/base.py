"""Shared structlog wiring for application service probes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Self

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class StructlogProbe:
    """Base for default probes: holds the logger and bound context."""

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

    def with_context(self, context: ObservationContext) -> Self:
        """Create a new probe with observation context bound."""
        return type(self)(logger=self._logger, context=context)
