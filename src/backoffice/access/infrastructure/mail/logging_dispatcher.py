"""Mail dispatcher that records messages instead of sending them.

Used in development and by the sweep script; production deployments plug a
transport-backed IMailDispatcher in its place. The accept link carries the
single-use token and is never written to the log.
"""

from __future__ import annotations

import structlog

from access.ports.mail import InvitationEmail


class LoggingMailDispatcher:
    """IMailDispatcher that logs a redacted summary of every message."""

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None):
        self._logger = logger or structlog.get_logger()
        self.sent: list[InvitationEmail] = []

    async def send(self, message: InvitationEmail) -> None:
        """Record the message and log its envelope."""
        self.sent.append(message)
        self._logger.info(
            "invitation_email_dispatched",
            recipient_domain=message.to.rpartition("@")[2],
            subject=message.subject,
            tenant_name=message.tenant_name,
            expires_at=message.expires_at.isoformat() if message.expires_at else None,
        )
