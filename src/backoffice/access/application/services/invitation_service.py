"""Invitation application service for the Access bounded context.

Runs the invitation lifecycle: create, resend, cancel, accept, list and the
expiry sweep. Every mutation, its preconditions and its audit entry share one
transaction.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from access.application.invitation_mail import compose_invitation_email
from access.application.observability import (
    DefaultInvitationServiceProbe,
    InvitationServiceProbe,
)
from access.application.security import generate_invitation_token, hash_password
from access.application.services.common import (
    load_actor,
    require_tenant,
    seat_usage_of,
)
from access.domain.aggregates import Invitation, Tenant, User, normalize_email
from access.domain.policy import Action, ResourceKind, ResourceTarget, UserTarget, evaluate
from access.domain.role_assignment import check_grant_ceiling, check_platform_grant, check_scope
from access.domain.roles import RoleSlug
from access.domain.value_objects import (
    InvitationId,
    InvitationStatus,
    TenantId,
    UserId,
    UserStatus,
)
from access.ports.exceptions import (
    AccessError,
    CooldownActiveError,
    DuplicatePendingInvitationError,
    EmailAlreadyInUseError,
    ForbiddenError,
    InvalidOrExpiredInvitationError,
    InvitationNotFoundError,
)
from access.ports.mail import IMailDispatcher
from access.ports.repositories import (
    IInvitationRepository,
    ITenantRepository,
    IUserRepository,
)
from shared_kernel.audit import AuditAction, AuditActor, AuditOptions, IAuditTrail
from shared_kernel.clock import Clock, SystemClock
from shared_kernel.session import SessionContext


@dataclass(frozen=True)
class InvitationOptions:
    """Lifecycle knobs, normally taken from AccessSettings."""

    ttl: timedelta = timedelta(hours=168)
    resend_cooldown: timedelta = timedelta(minutes=5)
    token_bytes: int = 48
    accept_url_template: str = "http://localhost:8000/invitations/{token}/accept"
    product_name: str = "Back Office"
    enforce_seats_on_invite: bool = False


class InvitationService:
    """Application service for the invitation lifecycle."""

    def __init__(
        self,
        tenant_repository: ITenantRepository,
        user_repository: IUserRepository,
        invitation_repository: IInvitationRepository,
        audit_trail: IAuditTrail,
        mailer: IMailDispatcher,
        session: AsyncSession,
        clock: Clock | None = None,
        options: InvitationOptions | None = None,
        audit_options: AuditOptions | None = None,
        probe: InvitationServiceProbe | None = None,
    ):
        """Initialize InvitationService with dependencies.

        Args:
            tenant_repository: Repository for tenant lookups and row locks
            user_repository: Repository for user persistence and seat counts
            invitation_repository: Repository for invitation persistence
            audit_trail: Audit trail bound to the same session
            mailer: Dispatcher for invitation messages
            session: Database session for transaction management
            clock: Source of the current instant
            options: Invitation lifecycle options
            audit_options: Audit enrichment and redaction options
            probe: Optional domain probe for observability
        """
        self._tenants = tenant_repository
        self._users = user_repository
        self._invitations = invitation_repository
        self._audit = audit_trail
        self._mailer = mailer
        self._session = session
        self._clock = clock or SystemClock()
        self._options = options or InvitationOptions()
        self._audit_options = audit_options or AuditOptions()
        self._probe = probe or DefaultInvitationServiceProbe()

    async def create_invitation(
        self,
        actor_id: UserId,
        email: str,
        role: RoleSlug,
        tenant_id: TenantId | None,
        context: SessionContext,
    ) -> Invitation:
        """Invite someone to a tenant (or to the platform staff).

        The invitation is created pending, the message is dispatched and the
        send counters are recorded, all in one transaction. A mail failure
        rolls the invitation back.

        Args:
            actor_id: The inviting user
            email: Address of the invitee
            role: Role offered
            tenant_id: Tenant joined on acceptance, None for platform staff
            context: Request session

        Returns:
            The sent invitation (send_count == 1)

        Raises:
            ForbiddenError: If the actor may not invite this role here
            ScopeMismatchError: If role and tenant binding disagree
            PlatformRoleAssignmentError: If the platform role is offered
                without authority
            EmailAlreadyInUseError: If the address is already registered
            DuplicatePendingInvitationError: If a live invitation exists
            SeatLimitReachedError: If seats are enforced on invite and none
                is free
        """
        now = self._clock.now()
        try:
            async with self._session.begin():
                actor = await load_actor(self._users, actor_id)
                tenant = (
                    await require_tenant(self._tenants, tenant_id, for_update=True)
                    if tenant_id is not None
                    else None
                )

                evaluate(
                    actor, Action.CREATE_USER, UserTarget(None, role, tenant_id)
                ).raise_if_denied()
                check_scope(role, tenant_id)
                check_platform_grant(actor.role, role, tenant_id)
                check_grant_ceiling(actor.role, role)

                email = normalize_email(email)
                if await self._users.get_by_email(email) is not None:
                    raise EmailAlreadyInUseError()
                if await self._invitations.has_live_invitation(tenant_id, email, now):
                    raise DuplicatePendingInvitationError()

                seats_available = None
                if tenant is not None:
                    usage = await seat_usage_of(self._users, tenant)
                    if self._options.enforce_seats_on_invite:
                        usage.ensure_seat_available()
                    seats_available = usage.available

                invitation = Invitation.create(
                    email=email,
                    role=role,
                    tenant_id=tenant_id,
                    invited_by=actor.id,
                    token=generate_invitation_token(self._options.token_bytes),
                    now=now,
                    ttl=self._options.ttl,
                )
                await self._invitations.save(invitation)
                await self._dispatch(invitation, tenant, actor.id)
                invitation.record_sent(now)
                await self._invitations.save(invitation)

                entry = (
                    self._audit_options.builder(now)
                    .for_actor(actor.as_audit_actor())
                    .on("invitation", invitation.id)
                    .in_tenant(tenant_id)
                    .action(AuditAction.USER_INVITED)
                    .meta(email=invitation.email, role=role, expires_at=invitation.expires_at)
                    .with_session(context)
                    .build()
                )
                await self._audit.record(entry)
        except AccessError as e:
            self._probe.invitation_operation_rejected("create", e.code)
            raise

        self._probe.invitation_created(
            invitation_id=invitation.id.value,
            tenant_id=tenant_id.value if tenant_id else None,
            role=role.value,
            seats_available=seats_available,
        )
        return invitation

    async def resend_invitation(
        self,
        actor_id: UserId,
        invitation_id: InvitationId,
        context: SessionContext,
    ) -> Invitation:
        """Send an invitation again, reopening it when needed.

        Within the cooldown nothing changes and nothing is sent. Otherwise a
        cancelled or expired invitation gets a fresh token and is pending
        again, the expiry is extended, the message is dispatched and the
        counters are bumped in the same transaction.

        Raises:
            InvitationNotFoundError: If the invitation does not exist
            ForbiddenError: If the actor may not manage it
            InvitationAlreadyAcceptedError: If it was already accepted
            CooldownActiveError: If the last send is too recent
            EmailAlreadyInUseError: If a reopened address is now registered
            DuplicatePendingInvitationError: If a reopened address already
                has another live invitation
        """
        now = self._clock.now()
        try:
            async with self._session.begin():
                actor = await load_actor(self._users, actor_id)
                invitation = await self._require_invitation(invitation_id, for_update=True)
                evaluate(
                    actor,
                    Action.MANAGE_INVITATION,
                    ResourceTarget(ResourceKind.INVITATION, invitation.tenant_id),
                ).raise_if_denied()

                before = invitation.snapshot()
                reopened = invitation.prepare_resend(
                    now=now,
                    ttl=self._options.ttl,
                    cooldown=self._options.resend_cooldown,
                    new_token=generate_invitation_token(self._options.token_bytes),
                )
                if reopened:
                    if await self._users.get_by_email(invitation.email) is not None:
                        raise EmailAlreadyInUseError()
                    if await self._invitations.has_live_invitation(
                        invitation.tenant_id, invitation.email, now, exclude=invitation.id
                    ):
                        raise DuplicatePendingInvitationError()
                tenant = (
                    await self._tenants.get_by_id(invitation.tenant_id)
                    if invitation.tenant_id is not None
                    else None
                )
                await self._dispatch(invitation, tenant, actor.id)
                invitation.record_sent(now)
                await self._invitations.save(invitation)

                entry = (
                    self._audit_options.builder(now)
                    .for_actor(actor.as_audit_actor())
                    .on("invitation", invitation.id)
                    .in_tenant(invitation.tenant_id)
                    .action(AuditAction.INVITE_RESENT)
                    .changes_from(
                        before,
                        invitation.snapshot(),
                        only=("status", "expires_at", "send_count"),
                    )
                    .meta(reopened=reopened, email=invitation.email)
                    .with_session(context)
                    .build()
                )
                await self._audit.record(entry)
        except CooldownActiveError as e:
            self._probe.resend_throttled(invitation_id.value, e.seconds_left)
            raise
        except AccessError as e:
            self._probe.invitation_operation_rejected("resend", e.code, invitation_id.value)
            raise

        self._probe.invitation_resent(
            invitation_id=invitation.id.value,
            reopened=reopened,
            send_count=invitation.send_count,
        )
        return invitation

    async def cancel_invitation(
        self,
        actor_id: UserId,
        invitation_id: InvitationId,
        context: SessionContext,
    ) -> Invitation:
        """Cancel an invitation.

        Cancelling an accepted or already cancelled invitation is a no-op:
        no error, no write and no audit entry.

        Raises:
            InvitationNotFoundError: If the invitation does not exist
            ForbiddenError: If the actor may not manage it
        """
        now = self._clock.now()
        try:
            async with self._session.begin():
                actor = await load_actor(self._users, actor_id)
                invitation = await self._require_invitation(invitation_id, for_update=True)
                evaluate(
                    actor,
                    Action.MANAGE_INVITATION,
                    ResourceTarget(ResourceKind.INVITATION, invitation.tenant_id),
                ).raise_if_denied()

                before = invitation.snapshot()
                changed = invitation.cancel(now)
                if changed:
                    await self._invitations.save(invitation)
                    entry = (
                        self._audit_options.builder(now)
                        .for_actor(actor.as_audit_actor())
                        .on("invitation", invitation.id)
                        .in_tenant(invitation.tenant_id)
                        .action(AuditAction.INVITE_CANCELLED)
                        .changes_from(
                            before, invitation.snapshot(), only=("status", "expires_at")
                        )
                        .meta(email=invitation.email)
                        .with_session(context)
                        .build()
                    )
                    await self._audit.record(entry)
        except AccessError as e:
            self._probe.invitation_operation_rejected("cancel", e.code, invitation_id.value)
            raise

        self._probe.invitation_cancelled(invitation.id.value, changed=changed)
        return invitation

    async def accept_invitation(
        self,
        token: str,
        name: str,
        password: str,
        context: SessionContext,
    ) -> User:
        """Redeem an invitation token and create the invited user.

        The seat check here is authoritative: it runs with the tenant row
        locked, so concurrent acceptances for the last seat are serialized
        and only one succeeds. A refused acceptance leaves the invitation
        pending.

        If the address was registered in the meantime the invitation is
        still consumed (committed) so the token cannot be replayed, then
        EmailAlreadyInUseError is raised.

        Args:
            token: The single-use token from the accept link
            name: Display name of the new user
            password: Chosen password (hashed with bcrypt, never stored)
            context: Request session

        Returns:
            The created, active user

        Raises:
            InvalidOrExpiredInvitationError: If the token is unknown, used,
                cancelled or expired, or the tenant is gone
            EmailAlreadyInUseError: If the address is already registered
            SeatLimitReachedError: If the tenant has no free seat
        """
        password_hash = hash_password(password)
        now = self._clock.now()
        user: User | None = None
        try:
            async with self._session.begin():
                invitation = await self._invitations.get_acceptable_by_token(token, now)
                if invitation is None:
                    raise InvalidOrExpiredInvitationError()

                if await self._users.get_by_email(invitation.email) is not None:
                    invitation.accept(now)
                    await self._invitations.mark_accepted_if_pending(invitation.id, now)
                else:
                    if invitation.tenant_id is not None:
                        tenant = await self._tenants.get_by_id(
                            invitation.tenant_id, for_update=True
                        )
                        if tenant is None or not tenant.is_active:
                            raise InvalidOrExpiredInvitationError()
                        usage = await seat_usage_of(self._users, tenant)
                        usage.ensure_seat_available()

                    invitation.accept(now)
                    if not await self._invitations.mark_accepted_if_pending(
                        invitation.id, now
                    ):
                        raise InvalidOrExpiredInvitationError()

                    user = User.create(
                        email=invitation.email,
                        name=name,
                        role=invitation.role,
                        tenant_id=invitation.tenant_id,
                        password_hash=password_hash,
                        status=UserStatus.ACTIVE,
                        email_verified=True,
                    )
                    await self._users.save(user)

                    entry = (
                        self._audit_options.builder(now)
                        .for_actor(
                            AuditActor(
                                id=user.id.value,
                                role=user.role.value,
                                tenant_id=user.tenant_id.value if user.tenant_id else None,
                            )
                        )
                        .on("invitation", invitation.id)
                        .in_tenant(invitation.tenant_id)
                        .action(AuditAction.INVITE_ACCEPTED)
                        .changes(
                            {"status": {"old": "pending", "new": "accepted"}}
                        )
                        .meta(user_id=user.id, email=user.email, role=user.role)
                        .with_session(context)
                        .build()
                    )
                    await self._audit.record(entry)
        except AccessError as e:
            self._probe.invitation_operation_rejected("accept", e.code)
            raise

        if user is None:
            # the invitation was consumed because the address is taken
            self._probe.invitation_operation_rejected(
                "accept", EmailAlreadyInUseError.code, invitation.id.value
            )
            raise EmailAlreadyInUseError()

        self._probe.invitation_accepted(
            invitation_id=invitation.id.value,
            user_id=user.id.value,
            tenant_id=user.tenant_id.value if user.tenant_id else None,
        )
        return user

    async def expire_stale(
        self,
        dry_run: bool = False,
        context: SessionContext | None = None,
    ) -> list[Invitation]:
        """Materialize EXPIRED for pending invitations past their expiry.

        Each expiry is audited as a system action (no actor).

        Args:
            dry_run: Only report what would expire
            context: Job session (a system session is created if omitted)

        Returns:
            The invitations that expired (or would expire)
        """
        now = self._clock.now()
        context = context or SessionContext.system()
        async with self._session.begin():
            stale = await self._invitations.list_expired_pending(
                now, for_update=not dry_run
            )
            if not dry_run:
                for invitation in stale:
                    invitation.expire(now)
                    await self._invitations.save(invitation)
                    entry = (
                        self._audit_options.builder(now)
                        .for_actor(None)
                        .on("invitation", invitation.id)
                        .in_tenant(invitation.tenant_id)
                        .action(AuditAction.INVITE_EXPIRED)
                        .changes({"status": {"old": "pending", "new": "expired"}})
                        .meta(email=invitation.email, expired_at=invitation.expires_at)
                        .with_session(context)
                        .build()
                    )
                    await self._audit.record(entry)

        self._probe.invitations_expired(count=len(stale), dry_run=dry_run)
        return stale

    async def list_invitations(
        self,
        actor_id: UserId,
        tenant_id: TenantId | None = None,
        status: InvitationStatus | None = InvitationStatus.PENDING,
    ) -> list[Invitation]:
        """List invitations visible to the actor.

        Platform super admins see every tenant, or one tenant when
        ``tenant_id`` is given. Tenant managers see their own tenant only.
        The default filter is live pending invitations (expired excluded).

        Raises:
            ForbiddenError: If the actor may not manage invitations there
        """
        now = self._clock.now()
        async with self._session.begin():
            actor = await load_actor(self._users, actor_id)
            if actor.is_platform_super_admin:
                return await self._invitations.list_invitations(
                    tenant_id=tenant_id,
                    status=status,
                    now=now,
                    all_tenants=tenant_id is None,
                )

            scope = tenant_id if tenant_id is not None else actor.tenant_id
            decision = evaluate(
                actor,
                Action.MANAGE_INVITATION,
                ResourceTarget(ResourceKind.INVITATION, scope),
            )
            if not decision.allowed:
                self._probe.invitation_operation_rejected("list", ForbiddenError.code)
                decision.raise_if_denied()
            return await self._invitations.list_invitations(
                tenant_id=scope, status=status, now=now
            )

    async def _require_invitation(
        self, invitation_id: InvitationId, for_update: bool = False
    ) -> Invitation:
        invitation = await self._invitations.get_by_id(invitation_id, for_update=for_update)
        if invitation is None:
            raise InvitationNotFoundError()
        return invitation

    async def _dispatch(
        self, invitation: Invitation, tenant: Tenant | None, inviter_id: UserId
    ) -> None:
        inviter = await self._users.get_by_id(inviter_id)
        message = compose_invitation_email(
            invitation=invitation,
            tenant=tenant,
            inviter_name=inviter.name if inviter else None,
            accept_url_template=self._options.accept_url_template,
            product_name=self._options.product_name,
        )
        await self._mailer.send(message)
