"""Protocol for user administration observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from access.application.observability.base import StructlogProbe

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class UserServiceProbe(Protocol):
    """Domain probe for user administration operations."""

    def user_created(self, user_id: str, tenant_id: str | None, role: str) -> None:
        """Record that a user was created directly."""
        ...

    def user_role_changed(self, user_id: str, old_role: str, new_role: str) -> None:
        """Record that a user's role changed."""
        ...

    def user_status_changed(
        self, user_id: str, old_status: str, new_status: str
    ) -> None:
        """Record that a user's status changed."""
        ...

    def user_operation_rejected(
        self, operation: str, code: str, user_id: str | None = None
    ) -> None:
        """Record that an operation was refused with an Access error."""
        ...

    def with_context(self, context: ObservationContext) -> UserServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultUserServiceProbe(StructlogProbe):
    """Default implementation of UserServiceProbe using structlog."""

    def user_created(self, user_id: str, tenant_id: str | None, role: str) -> None:
        """Record that a user was created directly."""
        self._logger.info(
            "user_created",
            user_id=user_id,
            tenant_id=tenant_id,
            role=role,
            **self._get_context_kwargs(),
        )

    def user_role_changed(self, user_id: str, old_role: str, new_role: str) -> None:
        """Record that a user's role changed."""
        self._logger.info(
            "user_role_changed",
            user_id=user_id,
            old_role=old_role,
            new_role=new_role,
            **self._get_context_kwargs(),
        )

    def user_status_changed(
        self, user_id: str, old_status: str, new_status: str
    ) -> None:
        """Record that a user's status changed."""
        self._logger.info(
            "user_status_changed",
            user_id=user_id,
            old_status=old_status,
            new_status=new_status,
            **self._get_context_kwargs(),
        )

    def user_operation_rejected(
        self, operation: str, code: str, user_id: str | None = None
    ) -> None:
        """Record that an operation was refused with an Access error."""
        self._logger.warning(
            "user_operation_rejected",
            operation=operation,
            code=code,
            user_id=user_id,
            **self._get_context_kwargs(),
        )
