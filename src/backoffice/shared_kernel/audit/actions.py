"""Stable audit action keys.

These strings are persisted and queried by reporting; never rename a member's
value once it has shipped.
"""

from enum import StrEnum


class AuditAction(StrEnum):
    """Dotted keys identifying each audited mutation."""

    USER_INVITED = "user.invited"
    USER_CREATED = "user.created"
    USER_ROLE_CHANGED = "user.role_changed"
    USER_STATUS_CHANGED = "user.status_changed"

    INVITE_RESENT = "invite.resent"
    INVITE_CANCELLED = "invite.cancelled"
    INVITE_ACCEPTED = "invite.accepted"
    INVITE_EXPIRED = "invite.expired"

    TENANT_CREATED = "tenant.created"
    TENANT_UPDATED = "tenant.updated"
    TENANT_SUSPENDED = "tenant.suspended"
    TENANT_RESUMED = "tenant.resumed"
    TENANT_DELETED = "tenant.deleted"
    TENANT_SEATS_UPDATED = "tenant.seats_updated"
    TENANT_SEATS_UPGRADE_REQUESTED = "tenant.seats_upgrade_requested"

    IMPERSONATION_STARTED = "impersonation.started"
    IMPERSONATION_ENDED = "impersonation.ended"
