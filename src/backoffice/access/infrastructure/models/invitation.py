"""SQLAlchemy ORM model for the invitations table."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class InvitationModel(Base, TimestampMixin):
    """ORM model for invitations table.

    Notes:
    - token is unique; the accept link is rebuilt from it on resend
    - tenant_id is NULL for platform staff invitations
    - invited_by is NULL when the inviter was removed
    """

    __tablename__ = "invitations"

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    tenant_id: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("tenants.id", ondelete="RESTRICT"),
        nullable=True,
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    role_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("roles.id", ondelete="RESTRICT"), nullable=False
    )
    token: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    invited_by: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    last_sent_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    send_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    __table_args__ = (
        Index("idx_invitations_tenant_email_status", "tenant_id", "email", "status"),
        Index("idx_invitations_status_expires", "status", "expires_at"),
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<InvitationModel(id={self.id}, email={self.email}, "
            f"status={self.status})>"
        )
