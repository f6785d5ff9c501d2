"""Audit trail contracts shared by every bounded context.

Use cases build entries with AuditEntryBuilder and append them through an
IAuditTrail bound to the same transaction as the mutation.
"""

from shared_kernel.audit.actions import AuditAction
from shared_kernel.audit.builder import AuditEntryBuilder, AuditOptions
from shared_kernel.audit.observability import AuditTrailProbe, DefaultAuditTrailProbe
from shared_kernel.audit.ports import AuditWriteError, IAuditTrail
from shared_kernel.audit.redaction import REDACTED, redact
from shared_kernel.audit.value_objects import (
    AuditActor,
    AuditEntry,
    AuditLogEntry,
    SubjectRef,
)

__all__ = [
    "AuditAction",
    "AuditActor",
    "AuditEntry",
    "AuditEntryBuilder",
    "AuditLogEntry",
    "AuditOptions",
    "AuditTrailProbe",
    "AuditWriteError",
    "DefaultAuditTrailProbe",
    "IAuditTrail",
    "REDACTED",
    "SubjectRef",
    "redact",
]
