"""Persistence for the append-only audit log."""

from infrastructure.audit.models import AuditLogModel
from infrastructure.audit.repository import SqlAuditTrail

__all__ = ["AuditLogModel", "SqlAuditTrail"]
