"""Outbound mail port.

Only the invitation message is sent from the Access core. Transport (SMTP,
provider API, queue) is an adapter concern.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, runtime_checkable


class MailDispatchError(Exception):
    """Raised when a message could not be handed to the transport."""

    code = "mail_dispatch_failed"


@dataclass(frozen=True)
class InvitationEmail:
    """An invitation message ready to send.

    Attributes:
        to: Recipient address
        subject: Rendered subject line
        accept_url: Link carrying the single-use token
        role_name: Display name of the offered role
        tenant_name: Inviting tenant, None for platform staff invitations
        inviter_name: Display name of the inviting user, if any
        expires_at: When the link stops working
    """

    to: str
    subject: str
    accept_url: str
    role_name: str
    tenant_name: str | None
    inviter_name: str | None
    expires_at: datetime | None


@runtime_checkable
class IMailDispatcher(Protocol):
    """Sends invitation messages."""

    async def send(self, message: InvitationEmail) -> None:
        """Hand a message to the transport.

        Raises:
            MailDispatchError: If the transport rejected the message
        """
        ...
