"""SQLAlchemy ORM models for the Access bounded context.

These models map to database tables and are used by repository implementations.
"""

from access.infrastructure.models.invitation import InvitationModel
from access.infrastructure.models.role import RoleModel, seed_roles
from access.infrastructure.models.tenant import TenantModel
from access.infrastructure.models.user import UserModel

__all__ = [
    "InvitationModel",
    "RoleModel",
    "TenantModel",
    "UserModel",
    "seed_roles",
]
