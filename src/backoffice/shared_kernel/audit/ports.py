"""Protocols (ports) for the audit trail.

The trail shares the caller's database session, so an entry is committed or
rolled back together with the mutation it describes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from shared_kernel.audit.value_objects import AuditEntry, AuditLogEntry


class AuditWriteError(Exception):
    """Raised when an audit entry cannot be persisted.

    Callers must let this propagate out of their transaction block so the
    audited mutation is rolled back with it.
    """

    code = "audit_write_failed"


@runtime_checkable
class IAuditTrail(Protocol):
    """Append-only store of audit entries."""

    async def record(self, entry: "AuditEntry") -> "AuditLogEntry":
        """Append an entry within the current transaction.

        Args:
            entry: The built, redacted entry

        Returns:
            The persisted log entry with its assigned id

        Raises:
            AuditWriteError: If the entry could not be written
        """
        ...
