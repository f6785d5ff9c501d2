"""User aggregate for the Access context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from access.domain.role_assignment import check_scope
from access.domain.roles import RoleSlug
from access.domain.value_objects import TenantId, UserId, UserStatus


def normalize_email(email: str) -> str:
    """Normalize an email address for storage and comparison.

    Raises:
        ValueError: If the address has no local part or domain
    """
    normalized = email.strip().lower()
    local, sep, domain = normalized.partition("@")
    if not sep or not local or not domain or "@" in domain:
        raise ValueError(f"Invalid email address: {email!r}")
    return normalized


@dataclass
class User:
    """User aggregate.

    Business rules:
    - A user holds exactly one role
    - tenant_id is None exactly when the role is platform-scoped
    - Only ACTIVE tenant users hold a seat
    """

    id: UserId
    email: str
    name: str
    role: RoleSlug
    tenant_id: TenantId | None
    status: UserStatus = UserStatus.ACTIVE
    password_hash: str | None = None
    email_verified: bool = False

    @classmethod
    def create(
        cls,
        email: str,
        name: str,
        role: RoleSlug,
        tenant_id: TenantId | None,
        password_hash: str | None,
        status: UserStatus = UserStatus.ACTIVE,
        email_verified: bool = False,
    ) -> User:
        """Factory method for creating a new user.

        Raises:
            ScopeMismatchError: If role and tenant binding disagree
            ValueError: If email or name is malformed
        """
        check_scope(role, tenant_id)
        name = name.strip()
        if not name:
            raise ValueError("User name must not be empty")

        return cls(
            id=UserId.generate(),
            email=normalize_email(email),
            name=name,
            role=role,
            tenant_id=tenant_id,
            status=status,
            password_hash=password_hash,
            email_verified=email_verified,
        )

    @property
    def is_active(self) -> bool:
        """Whether the user may sign in and act."""
        return self.status == UserStatus.ACTIVE

    @property
    def holds_seat(self) -> bool:
        """Whether the user counts against its tenant's seat limit."""
        return self.tenant_id is not None and self.is_active

    def change_role(self, new_role: RoleSlug) -> RoleSlug:
        """Assign a new role, already checked by the assignment guard.

        Returns:
            The previous role
        """
        previous = self.role
        self.role = new_role
        return previous

    def change_status(self, new_status: UserStatus) -> UserStatus:
        """Set a new account status.

        Returns:
            The previous status
        """
        previous = self.status
        self.status = new_status
        return previous

    def snapshot(self) -> dict[str, Any]:
        """Field values used for audit diffs."""
        return {
            "email": self.email,
            "name": self.name,
            "role": self.role.value,
            "status": self.status.value,
            "tenant_id": self.tenant_id.value if self.tenant_id else None,
        }
