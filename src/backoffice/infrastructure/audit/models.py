"""SQLAlchemy ORM model for the audit_logs table.

Rows are inserted once and never updated or deleted by the application.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import BigInteger, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, JSONDocument, _utc_now


class AuditLogModel(Base):
    """ORM model for the audit_logs table."""

    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        autoincrement=True,
    )
    actor_id: Mapped[str | None] = mapped_column(String(26), nullable=True)
    action: Mapped[str] = mapped_column(String(100), nullable=False)
    subject_type: Mapped[str] = mapped_column(String(50), nullable=False)
    subject_id: Mapped[str] = mapped_column(String(64), nullable=False)
    meta: Mapped[dict[str, Any]] = mapped_column(JSONDocument, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        insert_default=_utc_now,
        nullable=False,
    )

    __table_args__ = (
        Index("idx_audit_logs_subject", "subject_type", "subject_id"),
        Index("idx_audit_logs_actor", "actor_id"),
        Index("idx_audit_logs_action_created", "action", "created_at"),
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<AuditLogModel(id={self.id}, action={self.action}, "
            f"subject={self.subject_type}:{self.subject_id})>"
        )
