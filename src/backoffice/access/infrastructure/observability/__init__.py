"""Domain-Oriented Observability for Access infrastructure."""

from access.infrastructure.observability.repository_probe import (
    DefaultInvitationRepositoryProbe,
    DefaultTenantRepositoryProbe,
    DefaultUserRepositoryProbe,
    InvitationRepositoryProbe,
    TenantRepositoryProbe,
    UserRepositoryProbe,
)

__all__ = [
    "DefaultInvitationRepositoryProbe",
    "DefaultTenantRepositoryProbe",
    "DefaultUserRepositoryProbe",
    "InvitationRepositoryProbe",
    "TenantRepositoryProbe",
    "UserRepositoryProbe",
]
