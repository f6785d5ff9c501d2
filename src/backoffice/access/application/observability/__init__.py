"""Domain-Oriented Observability for Access application services."""

from access.application.observability.impersonation_probe import (
    DefaultImpersonationProbe,
    ImpersonationProbe,
)
from access.application.observability.invitation_service_probe import (
    DefaultInvitationServiceProbe,
    InvitationServiceProbe,
)
from access.application.observability.tenant_service_probe import (
    DefaultTenantServiceProbe,
    TenantServiceProbe,
)
from access.application.observability.user_service_probe import (
    DefaultUserServiceProbe,
    UserServiceProbe,
)

__all__ = [
    "DefaultImpersonationProbe",
    "DefaultInvitationServiceProbe",
    "DefaultTenantServiceProbe",
    "DefaultUserServiceProbe",
    "ImpersonationProbe",
    "InvitationServiceProbe",
    "TenantServiceProbe",
    "UserServiceProbe",
]
