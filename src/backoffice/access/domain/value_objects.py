"""Value objects for the Access domain.

Value objects are immutable descriptors that provide type safety and
domain semantics for identifiers and domain concepts.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Self

from ulid import ULID


@dataclass(frozen=True)
class _UlidId:
    """Base for ULID-backed identifiers.

    Uses ULID for sortability and distribution-friendly generation.
    """

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> Self:
        """Generate a new identifier using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> Self:
        """Create an identifier from its string value.

        Args:
            value: ULID string

        Returns:
            Identifier instance

        Raises:
            ValueError: If value is not a valid ULID
        """
        try:
            ULID.from_str(value)
        except ValueError as e:
            raise ValueError(f"Invalid {cls.__name__}: {value}") from e

        return cls(value=value)


@dataclass(frozen=True)
class TenantId(_UlidId):
    """Identifier for a Tenant aggregate."""


@dataclass(frozen=True)
class UserId(_UlidId):
    """Identifier for a User aggregate."""


@dataclass(frozen=True)
class InvitationId(_UlidId):
    """Identifier for an Invitation aggregate."""


class TenantStatus(StrEnum):
    """Lifecycle status of a tenant."""

    ACTIVE = "active"
    SUSPENDED = "suspended"
    PENDING = "pending"


class UserStatus(StrEnum):
    """Account status of a user.

    Only ACTIVE users consume a seat and may act.
    """

    ACTIVE = "active"
    PENDING_INVITE = "pending_invite"
    SUSPENDED = "suspended"
    LOCKED = "locked"


class InvitationStatus(StrEnum):
    """Stored status of an invitation.

    A PENDING invitation whose expires_at has passed is treated as expired
    even before the sweep job materializes EXPIRED.
    """

    PENDING = "pending"
    ACCEPTED = "accepted"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
