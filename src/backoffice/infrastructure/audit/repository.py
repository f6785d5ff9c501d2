"""PostgreSQL implementation of IAuditTrail.

Entries are added to the caller's session and flushed immediately so the
assigned id is known and write failures surface inside the caller's
transaction, rolling back the audited mutation with it.
"""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.audit.models import AuditLogModel
from shared_kernel.audit.observability import AuditTrailProbe, DefaultAuditTrailProbe
from shared_kernel.audit.ports import AuditWriteError
from shared_kernel.audit.value_objects import AuditEntry, AuditLogEntry


class SqlAuditTrail:
    """Append-only audit trail stored in the audit_logs table."""

    def __init__(
        self,
        session: AsyncSession,
        probe: AuditTrailProbe | None = None,
    ) -> None:
        """Initialize the trail with the caller's session.

        Args:
            session: Session shared with the service performing the mutation
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultAuditTrailProbe()

    async def record(self, entry: AuditEntry) -> AuditLogEntry:
        """Append an entry within the current transaction.

        Args:
            entry: The built, redacted entry

        Returns:
            The persisted log entry

        Raises:
            AuditWriteError: If the insert fails
        """
        model = AuditLogModel(
            actor_id=entry.actor_id,
            action=entry.action,
            subject_type=entry.subject_type,
            subject_id=entry.subject_id,
            meta=entry.meta,
        )
        try:
            self._session.add(model)
            await self._session.flush()
        except SQLAlchemyError as e:
            self._probe.entry_write_failed(action=entry.action, error=str(e))
            raise AuditWriteError(
                f"Failed to record audit entry '{entry.action}'"
            ) from e

        self._probe.entry_recorded(
            entry_id=model.id,
            action=model.action,
            subject_type=model.subject_type,
            subject_id=model.subject_id,
        )
        return AuditLogEntry(
            id=model.id,
            actor_id=model.actor_id,
            action=model.action,
            subject_type=model.subject_type,
            subject_id=model.subject_id,
            meta=model.meta,
            created_at=model.created_at,
        )
