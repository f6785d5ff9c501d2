"""Application services for the Access bounded context."""

from access.application.services.impersonation_service import ImpersonationService
from access.application.services.invitation_service import (
    InvitationOptions,
    InvitationService,
)
from access.application.services.seat_service import SeatService
from access.application.services.tenant_service import TenantService
from access.application.services.user_service import UserService

__all__ = [
    "ImpersonationService",
    "InvitationOptions",
    "InvitationService",
    "SeatService",
    "TenantService",
    "UserService",
]
