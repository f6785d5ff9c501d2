"""Tenant aggregate for the Access context."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from access.domain.value_objects import TenantId, TenantStatus

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:[-_][a-z0-9]+)*$")
MAX_NAME_LENGTH = 191


@dataclass
class Tenant:
    """Tenant aggregate representing a customer organization.

    Business rules:
    - The slug is unique and never changes once set
    - seat_limit is positive; active users never exceed it
    - Deletion is soft: deleted_at is set and the row stays for the audit trail
    """

    id: TenantId
    name: str
    slug: str
    status: TenantStatus = TenantStatus.ACTIVE
    seat_limit: int = 2
    deleted_at: datetime | None = None

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "slug" and "slug" in self.__dict__ and value != self.slug:
            raise AttributeError("Tenant slug is immutable")
        super().__setattr__(name, value)

    @classmethod
    def create(
        cls,
        name: str,
        slug: str,
        seat_limit: int,
        status: TenantStatus = TenantStatus.ACTIVE,
    ) -> Tenant:
        """Factory method for creating a new tenant.

        Args:
            name: Display name
            slug: URL-safe unique identifier (lower-case, digits, - and _)
            seat_limit: Maximum number of active users
            status: Initial status

        Raises:
            ValueError: If name or slug is malformed or seat_limit < 1
        """
        name = name.strip()
        if not name or len(name) > MAX_NAME_LENGTH:
            raise ValueError(f"Tenant name must be 1-{MAX_NAME_LENGTH} characters")
        if len(slug) > MAX_NAME_LENGTH or not SLUG_PATTERN.match(slug):
            raise ValueError(f"Invalid tenant slug: {slug!r}")
        if seat_limit < 1:
            raise ValueError("seat_limit must be positive")

        return cls(
            id=TenantId.generate(),
            name=name,
            slug=slug,
            status=status,
            seat_limit=seat_limit,
        )

    @property
    def is_deleted(self) -> bool:
        """Whether the tenant has been soft-deleted."""
        return self.deleted_at is not None

    @property
    def is_active(self) -> bool:
        """Whether the tenant is live and not deleted."""
        return self.status == TenantStatus.ACTIVE and not self.is_deleted

    def rename(self, name: str) -> bool:
        """Change the display name.

        Returns:
            True if the name changed
        """
        name = name.strip()
        if not name or len(name) > MAX_NAME_LENGTH:
            raise ValueError(f"Tenant name must be 1-{MAX_NAME_LENGTH} characters")
        if name == self.name:
            return False
        self.name = name
        return True

    def suspend(self) -> bool:
        """Suspend the tenant. Returns True if the status changed."""
        if self.status == TenantStatus.SUSPENDED:
            return False
        self.status = TenantStatus.SUSPENDED
        return True

    def resume(self) -> bool:
        """Reactivate the tenant. Returns True if the status changed."""
        if self.status == TenantStatus.ACTIVE:
            return False
        self.status = TenantStatus.ACTIVE
        return True

    def soft_delete(self, now: datetime) -> bool:
        """Mark the tenant deleted. Returns True if it was not already."""
        if self.is_deleted:
            return False
        self.deleted_at = now
        return True

    def change_seat_limit(self, new_limit: int) -> int:
        """Set a new seat limit, already validated against usage.

        Returns:
            The previous limit
        """
        previous = self.seat_limit
        self.seat_limit = new_limit
        return previous

    def snapshot(self) -> dict[str, Any]:
        """Field values used for audit diffs."""
        return {
            "name": self.name,
            "slug": self.slug,
            "status": self.status.value,
            "seat_limit": self.seat_limit,
            "deleted_at": self.deleted_at,
        }
