"""Port-level exceptions for the Access bounded context.

Lookup and uniqueness failures reported by repositories. Domain rule
violations live in access.domain.exceptions and are re-exported here so
entry points can import every Access error from one module.
"""

from access.domain.exceptions import (
    AccessError,
    CooldownActiveError,
    CrossTenantForbiddenError,
    DuplicatePendingInvitationError,
    EmailAlreadyInUseError,
    ForbiddenError,
    ImpersonationNotAllowedError,
    InvalidOrExpiredInvitationError,
    InvalidSeatLimitError,
    InvitationAlreadyAcceptedError,
    LastOwnerViolationError,
    NoChangeError,
    PlatformAdminShieldedError,
    PlatformRoleAssignmentError,
    ScopeMismatchError,
    SeatLimitBelowUsageError,
    SeatLimitReachedError,
    SelfChangeForbiddenError,
    UnknownRoleError,
)


class TenantNotFoundError(AccessError):
    """Raised when a tenant does not exist or has been deleted."""

    code = "tenant_not_found"
    default_message = "Tenant not found."


class UserNotFoundError(AccessError):
    """Raised when a user does not exist."""

    code = "user_not_found"
    default_message = "User not found."


class InvitationNotFoundError(AccessError):
    """Raised when an invitation does not exist."""

    code = "invitation_not_found"
    default_message = "Invitation not found."


class DuplicateTenantSlugError(AccessError):
    """Raised when a tenant slug is already taken.

    Slugs are globally unique and never reused, even after soft deletion.
    """

    code = "duplicate_tenant_slug"
    default_message = "This tenant slug is already taken."


__all__ = [
    "AccessError",
    "CooldownActiveError",
    "CrossTenantForbiddenError",
    "DuplicatePendingInvitationError",
    "DuplicateTenantSlugError",
    "EmailAlreadyInUseError",
    "ForbiddenError",
    "ImpersonationNotAllowedError",
    "InvalidOrExpiredInvitationError",
    "InvalidSeatLimitError",
    "InvitationAlreadyAcceptedError",
    "InvitationNotFoundError",
    "LastOwnerViolationError",
    "NoChangeError",
    "PlatformAdminShieldedError",
    "PlatformRoleAssignmentError",
    "ScopeMismatchError",
    "SeatLimitBelowUsageError",
    "SeatLimitReachedError",
    "SelfChangeForbiddenError",
    "TenantNotFoundError",
    "UnknownRoleError",
    "UserNotFoundError",
]
