"""Aggregates for the Access context."""

from access.domain.aggregates.invitation import Invitation
from access.domain.aggregates.tenant import Tenant
from access.domain.aggregates.user import User, normalize_email

__all__ = ["Invitation", "Tenant", "User", "normalize_email"]
