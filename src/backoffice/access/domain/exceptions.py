"""Domain exceptions for the Access bounded context.

Every error carries a stable machine-readable ``code`` and a display-safe
``message``. Entry points map codes to responses; the message never contains
tokens, passwords or other secrets.
"""

from __future__ import annotations

import math


class AccessError(Exception):
    """Base class for all Access errors."""

    code = "access_error"
    default_message = "The operation could not be completed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class UnknownRoleError(AccessError):
    """Raised when a role slug or id is not in the catalog."""

    code = "unknown_role"

    def __init__(self, key: object):
        self.key = key
        super().__init__(f"Unknown role: {key!r}")


# Authorization


class ForbiddenError(AccessError):
    """Raised when the policy evaluator denies an action.

    Attributes:
        reason: Deny reason reported by the evaluator
    """

    code = "forbidden"
    default_message = "You are not allowed to perform this action."

    def __init__(self, reason: str = "forbidden", message: str | None = None):
        self.reason = reason
        super().__init__(message)


class SelfChangeForbiddenError(ForbiddenError):
    """Raised when an actor tries to change their own role or status."""

    code = "self_change_forbidden"
    default_message = "You cannot perform this action on your own account."


class CrossTenantForbiddenError(ForbiddenError):
    """Raised when an actor reaches across the tenant boundary."""

    code = "cross_tenant_forbidden"
    default_message = "The target belongs to another tenant."


class PlatformAdminShieldedError(ForbiddenError):
    """Raised when a tenant actor targets a platform super admin."""

    code = "platform_admin_shielded"
    default_message = "Platform administrators cannot be managed here."


class ImpersonationNotAllowedError(ForbiddenError):
    """Raised for nested impersonation or impersonating an inactive user."""

    code = "impersonation_not_allowed"
    default_message = "Impersonation is not allowed in this situation."


# Invariants


class LastOwnerViolationError(AccessError):
    """Raised when a change would leave a tenant without an owner."""

    code = "last_owner"
    default_message = "A tenant must keep at least one owner."


class ScopeMismatchError(AccessError):
    """Raised when a role's scope does not match the user's tenant binding."""

    code = "scope_mismatch"
    default_message = (
        "Platform roles require no tenant and tenant roles require a tenant."
    )


class PlatformRoleAssignmentError(AccessError):
    """Raised when someone other than a platform super admin grants that role."""

    code = "platform_role_assignment"
    default_message = "Only platform administrators may grant platform roles."


class SeatLimitReachedError(AccessError):
    """Raised when a tenant has no free seat.

    Attributes:
        used: Active users counted against the limit
        limit: The tenant's seat limit
    """

    code = "seat_limit_reached"

    def __init__(self, used: int, limit: int):
        self.used = used
        self.limit = limit
        super().__init__(f"Seat limit reached ({used}/{limit}).")


class SeatLimitBelowUsageError(AccessError):
    """Raised when a new seat limit is lower than current usage."""

    code = "seat_limit_below_usage"

    def __init__(self, used: int, limit: int):
        self.used = used
        self.limit = limit
        super().__init__(
            f"Seat limit {limit} is below the {used} seats currently in use."
        )


class InvalidSeatLimitError(AccessError):
    """Raised when a seat limit is outside the allowed range."""

    code = "invalid_seat_limit"

    def __init__(self, limit: int, maximum: int):
        self.limit = limit
        self.maximum = maximum
        super().__init__(f"Seat limit must be between 1 and {maximum}, got {limit}.")


# Lifecycle


class InvalidOrExpiredInvitationError(AccessError):
    """Raised when an invitation token is unknown, used, cancelled or expired."""

    code = "invalid_or_expired"
    default_message = "This invitation is invalid or has expired."


class InvitationAlreadyAcceptedError(AccessError):
    """Raised when resending an invitation that was already accepted."""

    code = "already_accepted"
    default_message = "This invitation has already been accepted."


class CooldownActiveError(AccessError):
    """Raised when an invitation is resent before its cooldown elapsed.

    Attributes:
        seconds_left: Whole seconds until a resend is allowed
    """

    code = "cooldown_active"

    def __init__(self, seconds_left: int):
        self.seconds_left = seconds_left
        super().__init__(
            f"Please wait {self.minutes_left} minute(s) before resending."
        )

    @property
    def minutes_left(self) -> int:
        """Remaining cooldown rounded up to whole minutes."""
        return max(1, math.ceil(self.seconds_left / 60))


class DuplicatePendingInvitationError(AccessError):
    """Raised when a live invitation already exists for the tenant and email."""

    code = "duplicate_pending_invitation"
    default_message = "A pending invitation already exists for this email."


class EmailAlreadyInUseError(AccessError):
    """Raised when an email already belongs to a registered user."""

    code = "email_in_use"
    default_message = "This email is already registered."


class NoChangeError(AccessError):
    """Raised when a requested change would leave state unchanged."""

    code = "no_change"
    default_message = "Nothing to change."
