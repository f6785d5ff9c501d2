"""Seat accounting.

A seat is held by every active user of a tenant. Invitations hold no seat;
the seat is taken when the invitation is accepted.
"""

from __future__ import annotations

from dataclasses import dataclass

from access.domain.exceptions import (
    InvalidSeatLimitError,
    SeatLimitBelowUsageError,
    SeatLimitReachedError,
)

MAX_UPGRADE_NOTE_LENGTH = 2000


@dataclass(frozen=True)
class SeatUsage:
    """Seat usage of one tenant at one instant.

    Attributes:
        used: Active users in the tenant
        limit: The tenant's seat limit
    """

    used: int
    limit: int

    @property
    def available(self) -> int:
        """Free seats, never negative."""
        return max(0, self.limit - self.used)

    @property
    def can_add_seat(self) -> bool:
        """Whether one more active user fits."""
        return self.available > 0

    def ensure_seat_available(self) -> None:
        """Reject when no seat is free.

        Raises:
            SeatLimitReachedError: With the current used/limit numbers
        """
        if not self.can_add_seat:
            raise SeatLimitReachedError(used=self.used, limit=self.limit)

    def enforce_limit_on_increase(self, new_limit: int, maximum: int) -> None:
        """Validate a new seat limit against usage and the allowed range.

        Args:
            new_limit: Requested limit
            maximum: Highest limit the deployment allows

        Raises:
            InvalidSeatLimitError: If new_limit is not in [1, maximum]
            SeatLimitBelowUsageError: If new_limit is below current usage
        """
        if new_limit < 1 or new_limit > maximum:
            raise InvalidSeatLimitError(limit=new_limit, maximum=maximum)
        if new_limit < self.used:
            raise SeatLimitBelowUsageError(used=self.used, limit=new_limit)

    def request_upgrade(
        self, desired_limit: int, maximum: int, note: str | None = None
    ) -> SeatUpgradeRequest:
        """Validate a request for more seats.

        The desired limit must leave room for at least one more active user.

        Raises:
            InvalidSeatLimitError: If desired_limit is not in [1, maximum]
            SeatLimitBelowUsageError: If desired_limit does not exceed usage
            ValueError: If the note is too long
        """
        if desired_limit < 1 or desired_limit > maximum:
            raise InvalidSeatLimitError(limit=desired_limit, maximum=maximum)
        if desired_limit <= self.used:
            raise SeatLimitBelowUsageError(used=self.used, limit=desired_limit)
        return SeatUpgradeRequest(
            current_limit=self.limit,
            requested_limit=desired_limit,
            used=self.used,
            note=(note.strip() or None) if note else None,
        )


@dataclass(frozen=True)
class SeatUpgradeRequest:
    """A tenant's request for a higher seat limit, pending staff review."""

    current_limit: int
    requested_limit: int
    used: int
    note: str | None = None

    def __post_init__(self) -> None:
        if self.note is not None and len(self.note) > MAX_UPGRADE_NOTE_LENGTH:
            raise ValueError(
                f"Upgrade note must be at most {MAX_UPGRADE_NOTE_LENGTH} characters"
            )
