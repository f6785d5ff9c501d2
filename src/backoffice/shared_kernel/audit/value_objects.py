"""Value objects for the audit trail.

An AuditEntry is what a use case hands to the trail; an AuditLogEntry is
what the trail persisted. Both are immutable.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class AuditActor:
    """Snapshot of whoever performed an audited mutation.

    Attributes:
        id: User id of the actor
        role: Role slug the actor held at the time of the mutation
        tenant_id: Actor's tenant (None for platform staff)
    """

    id: str
    role: str
    tenant_id: str | None = None


@dataclass(frozen=True)
class SubjectRef:
    """Reference to the entity an audit entry is about."""

    type: str
    id: str


@dataclass(frozen=True)
class AuditEntry:
    """An audit record ready to be written.

    Attributes:
        actor_id: Actor user id, None for system/job mutations
        action: Stable dotted action key (e.g. "user.role_changed")
        subject_type: Kind of entity affected (e.g. "user", "invitation")
        subject_id: Id of the entity affected
        meta: Enriched, redacted, JSON-serializable metadata
    """

    actor_id: str | None
    action: str
    subject_type: str
    subject_id: str
    meta: dict[str, Any]


@dataclass(frozen=True)
class AuditLogEntry:
    """An audit record as persisted in the append-only log.

    Attributes:
        id: Monotonic log id assigned by the store
        actor_id: Actor user id, None for system/job mutations
        action: Stable dotted action key
        subject_type: Kind of entity affected
        subject_id: Id of the entity affected
        meta: Persisted metadata
        created_at: When the record was written
    """

    id: int
    actor_id: str | None
    action: str
    subject_type: str
    subject_id: str
    meta: dict[str, Any]
    created_at: datetime

    @property
    def subject(self) -> SubjectRef:
        """Reference to the entity this record is about."""
        return SubjectRef(type=self.subject_type, id=self.subject_id)

    @property
    def is_system(self) -> bool:
        """Whether the mutation was performed by a job rather than a user."""
        return self.actor_id is None
