"""Clock abstraction.

Every time-dependent rule (invitation expiry, resend cooldown, re-auth
window) reads the current instant through a Clock so that tests can pin it.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Source of the current instant (timezone-aware, UTC)."""

    def now(self) -> datetime:
        """Return the current UTC datetime."""
        ...


class SystemClock:
    """Clock backed by the system time."""

    def now(self) -> datetime:
        """Return the current UTC datetime."""
        return datetime.now(UTC)
