"""Observation context for domain-oriented observability.

Observation contexts collect and manage contextual metadata for instrumentation,
following the Domain Oriented Observability pattern.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any


@dataclass(frozen=True)
class ObservationContext:
    """Immutable context containing metadata for observability.

    Captures request-scoped and domain-relevant metadata that should be
    included with all instrumentation events.

    Attributes:
        request_id: Unique identifier for the current request/operation.
        actor_id: Identifier of the user performing the operation (if any).
        tenant_id: Tenant the operation is scoped to (if applicable).
        source: Origin of the operation ("api" or "job").
        extra: Additional contextual metadata.

    Example:
        context = ObservationContext(request_id="req-123", actor_id="01J...")
        probe = DefaultInvitationServiceProbe().with_context(context)
    """

    request_id: str | None = None
    actor_id: str | None = None
    tenant_id: str | None = None
    source: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging.

        Only includes non-None values to keep logs clean.
        """
        result: dict[str, Any] = {}
        if self.request_id is not None:
            result["request_id"] = self.request_id
        if self.actor_id is not None:
            result["actor_id"] = self.actor_id
        if self.tenant_id is not None:
            result["tenant_id"] = self.tenant_id
        if self.source is not None:
            result["source"] = self.source
        result.update(self.extra)
        return result

    def with_tenant(self, tenant_id: str | None) -> ObservationContext:
        """Create a new context with the tenant set."""
        return replace(self, tenant_id=tenant_id)

    def with_extra(self, **kwargs: Any) -> ObservationContext:
        """Create a new context with additional metadata."""
        return replace(self, extra={**self.extra, **kwargs})
