"""Dependency composition for the Access bounded context.

Builds repositories and services bound to one AsyncSession from the
configured settings. Entry points (handlers, jobs, scripts) open a session
with ``session_scope()`` and ask for the service they need.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from access.application.services import (
    ImpersonationService,
    InvitationOptions,
    InvitationService,
    SeatService,
    TenantService,
    UserService,
)
from access.infrastructure.invitation_repository import InvitationRepository
from access.infrastructure.mail import LoggingMailDispatcher
from access.infrastructure.tenant_repository import TenantRepository
from access.infrastructure.user_repository import UserRepository
from access.ports.mail import IMailDispatcher
from infrastructure.audit import SqlAuditTrail
from infrastructure.settings import get_access_settings, get_audit_settings
from shared_kernel.audit import AuditOptions
from shared_kernel.audit.redaction import DEFAULT_SENSITIVE_KEYS
from shared_kernel.clock import Clock


def get_audit_options() -> AuditOptions:
    """Build audit options from AuditSettings.

    Configured key names extend the built-in sensitive list; they never
    replace it.
    """
    settings = get_audit_settings()
    return AuditOptions(
        reauth_window=settings.reauth_window,
        sensitive_keys=DEFAULT_SENSITIVE_KEYS | frozenset(settings.extra_sensitive_keys),
    )


def get_invitation_options() -> InvitationOptions:
    """Build invitation options from AccessSettings."""
    settings = get_access_settings()
    return InvitationOptions(
        ttl=settings.invitation_ttl,
        resend_cooldown=settings.resend_cooldown,
        token_bytes=settings.invitation_token_bytes,
        accept_url_template=settings.invitation_accept_url,
        product_name=settings.mail_from_name,
        enforce_seats_on_invite=settings.enforce_seats_on_invite,
    )


def get_audit_trail(session: AsyncSession) -> SqlAuditTrail:
    """Get an audit trail sharing the caller's session."""
    return SqlAuditTrail(session=session)


def get_invitation_service(
    session: AsyncSession,
    mailer: IMailDispatcher | None = None,
    clock: Clock | None = None,
) -> InvitationService:
    """Get InvitationService instance.

    Args:
        session: Async database session shared by every collaborator
        mailer: Mail dispatcher (logs messages when omitted)
        clock: Clock override, mostly for tests

    Returns:
        InvitationService instance
    """
    return InvitationService(
        tenant_repository=TenantRepository(session=session),
        user_repository=UserRepository(session=session),
        invitation_repository=InvitationRepository(session=session),
        audit_trail=get_audit_trail(session),
        mailer=mailer or LoggingMailDispatcher(),
        session=session,
        clock=clock,
        options=get_invitation_options(),
        audit_options=get_audit_options(),
    )


def get_user_service(session: AsyncSession, clock: Clock | None = None) -> UserService:
    """Get UserService instance."""
    return UserService(
        user_repository=UserRepository(session=session),
        tenant_repository=TenantRepository(session=session),
        audit_trail=get_audit_trail(session),
        session=session,
        clock=clock,
        audit_options=get_audit_options(),
    )


def get_seat_service(session: AsyncSession, clock: Clock | None = None) -> SeatService:
    """Get SeatService instance."""
    return SeatService(
        tenant_repository=TenantRepository(session=session),
        user_repository=UserRepository(session=session),
        audit_trail=get_audit_trail(session),
        session=session,
        clock=clock,
        max_seat_limit=get_access_settings().max_seat_limit,
        audit_options=get_audit_options(),
    )


def get_tenant_service(
    session: AsyncSession, clock: Clock | None = None
) -> TenantService:
    """Get TenantService instance."""
    settings = get_access_settings()
    return TenantService(
        tenant_repository=TenantRepository(session=session),
        user_repository=UserRepository(session=session),
        audit_trail=get_audit_trail(session),
        session=session,
        clock=clock,
        default_seat_limit=settings.default_seat_limit,
        max_seat_limit=settings.max_seat_limit,
        audit_options=get_audit_options(),
    )


def get_impersonation_service(
    session: AsyncSession, clock: Clock | None = None
) -> ImpersonationService:
    """Get ImpersonationService instance."""
    return ImpersonationService(
        user_repository=UserRepository(session=session),
        audit_trail=get_audit_trail(session),
        session=session,
        clock=clock,
        audit_options=get_audit_options(),
    )
