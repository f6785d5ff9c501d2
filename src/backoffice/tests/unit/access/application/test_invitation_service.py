"""Unit tests for InvitationService.

Repositories, the audit trail and the mailer are mocked; the clock is pinned
so cooldowns and expiry are deterministic.
"""

from datetime import timedelta
from unittest.mock import create_autospec

import pytest

from access.application.observability import InvitationServiceProbe
from access.application.security import verify_password
from access.application.services.invitation_service import (
    InvitationOptions,
    InvitationService,
)
from access.domain.aggregates import Invitation, Tenant
from access.domain.roles import RoleSlug
from access.domain.value_objects import InvitationId, InvitationStatus, UserStatus
from access.ports.exceptions import (
    CooldownActiveError,
    CrossTenantForbiddenError,
    DuplicatePendingInvitationError,
    EmailAlreadyInUseError,
    ForbiddenError,
    InvalidOrExpiredInvitationError,
    InvitationAlreadyAcceptedError,
    InvitationNotFoundError,
    PlatformAdminShieldedError,
    SeatLimitReachedError,
)
from access.ports.mail import IMailDispatcher, MailDispatchError
from access.ports.repositories import (
    IInvitationRepository,
    ITenantRepository,
    IUserRepository,
)
from shared_kernel.audit import IAuditTrail

TTL = timedelta(hours=168)
COOLDOWN = timedelta(minutes=5)


@pytest.fixture
def owner(make_user, tenant):
    return make_user(RoleSlug.TENANT_OWNER, tenant)


@pytest.fixture
def super_admin(make_user):
    return make_user(RoleSlug.PLATFORM_SUPER_ADMIN)


@pytest.fixture
def users(owner, super_admin):
    """Users known to the mocked repository, keyed by id."""
    return {owner.id: owner, super_admin.id: super_admin}


@pytest.fixture
def mock_user_repository(users):
    repo = create_autospec(IUserRepository, instance=True)
    repo.get_by_id.side_effect = lambda user_id, for_update=False: users.get(user_id)
    repo.get_by_email.return_value = None
    repo.count_active.return_value = 1
    return repo


@pytest.fixture
def mock_tenant_repository(tenant):
    repo = create_autospec(ITenantRepository, instance=True)
    repo.get_by_id.side_effect = (
        lambda tenant_id, for_update=False: tenant if tenant_id == tenant.id else None
    )
    return repo


@pytest.fixture
def mock_invitation_repository():
    repo = create_autospec(IInvitationRepository, instance=True)
    repo.has_live_invitation.return_value = False
    repo.mark_accepted_if_pending.return_value = True
    repo.list_expired_pending.return_value = []
    return repo


@pytest.fixture
def mock_audit_trail():
    return create_autospec(IAuditTrail, instance=True)


@pytest.fixture
def mock_mailer():
    return create_autospec(IMailDispatcher, instance=True)


@pytest.fixture
def mock_probe():
    return create_autospec(InvitationServiceProbe, instance=True)


@pytest.fixture
def make_service(
    mock_tenant_repository,
    mock_user_repository,
    mock_invitation_repository,
    mock_audit_trail,
    mock_mailer,
    mock_session,
    clock,
    mock_probe,
):
    def _make(**option_overrides) -> InvitationService:
        options = InvitationOptions(ttl=TTL, resend_cooldown=COOLDOWN, **option_overrides)
        return InvitationService(
            tenant_repository=mock_tenant_repository,
            user_repository=mock_user_repository,
            invitation_repository=mock_invitation_repository,
            audit_trail=mock_audit_trail,
            mailer=mock_mailer,
            session=mock_session,
            clock=clock,
            options=options,
            probe=mock_probe,
        )

    return _make


@pytest.fixture
def service(make_service):
    return make_service()


@pytest.fixture
def sent_invitation(tenant, owner, t0, mock_invitation_repository):
    """An invitation created and sent at t0, returned by the repository."""
    invitation = Invitation.create(
        email="new.hire@example.com",
        role=RoleSlug.TENANT_EDITOR,
        tenant_id=tenant.id,
        invited_by=owner.id,
        token="tok-" + "a" * 60,
        now=t0,
        ttl=TTL,
    )
    invitation.record_sent(t0)
    mock_invitation_repository.get_by_id.side_effect = (
        lambda invitation_id, for_update=False: invitation
        if invitation_id == invitation.id
        else None
    )
    mock_invitation_repository.get_acceptable_by_token.side_effect = (
        lambda token, now: invitation
        if token == invitation.token and invitation.is_acceptable(now)
        else None
    )
    return invitation


def _recorded_entries(mock_audit_trail):
    return [call.args[0] for call in mock_audit_trail.record.await_args_list]


class TestCreateInvitation:
    """Tests for create_invitation."""

    @pytest.mark.asyncio
    async def test_creates_and_sends_pending_invitation(
        self, service, owner, tenant, session_context, mock_mailer, mock_audit_trail, t0
    ):
        invitation = await service.create_invitation(
            owner.id, "New.Hire@Example.com", RoleSlug.TENANT_EDITOR, tenant.id, session_context
        )

        assert invitation.status == InvitationStatus.PENDING
        assert invitation.email == "new.hire@example.com"
        assert invitation.expires_at == t0 + TTL
        assert invitation.send_count == 1
        assert invitation.last_sent_at == t0
        assert len(invitation.token) >= 64

        mock_mailer.send.assert_awaited_once()
        message = mock_mailer.send.await_args.args[0]
        assert message.to == "new.hire@example.com"
        assert message.subject == "You're invited to Acme on Back Office"
        assert invitation.token in message.accept_url

        [entry] = _recorded_entries(mock_audit_trail)
        assert entry.action == "user.invited"
        assert entry.actor_id == owner.id.value
        assert entry.subject_id == invitation.id.value
        assert entry.meta["tenant_id"] == tenant.id.value
        assert invitation.token not in str(entry.meta)

    @pytest.mark.asyncio
    async def test_full_tenant_can_still_invite(
        self, service, owner, tenant, session_context, mock_user_repository, mock_probe
    ):
        """Invitations hold no seat; acceptance is where the seat is checked."""
        tenant.seat_limit = 1
        mock_user_repository.count_active.return_value = 1

        invitation = await service.create_invitation(
            owner.id, "late@example.com", RoleSlug.TENANT_VIEWER, tenant.id, session_context
        )

        assert invitation.status == InvitationStatus.PENDING
        mock_probe.invitation_created.assert_called_once_with(
            invitation_id=invitation.id.value,
            tenant_id=tenant.id.value,
            role="tenant_viewer",
            seats_available=0,
        )

    @pytest.mark.asyncio
    async def test_seat_check_on_invite_when_enabled(
        self, make_service, owner, tenant, session_context, mock_user_repository, mock_mailer
    ):
        service = make_service(enforce_seats_on_invite=True)
        tenant.seat_limit = 1
        mock_user_repository.count_active.return_value = 1

        with pytest.raises(SeatLimitReachedError) as exc_info:
            await service.create_invitation(
                owner.id, "late@example.com", RoleSlug.TENANT_VIEWER, tenant.id, session_context
            )

        assert (exc_info.value.used, exc_info.value.limit) == (1, 1)
        mock_mailer.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rejects_duplicate_pending(
        self,
        service,
        owner,
        tenant,
        session_context,
        mock_invitation_repository,
        mock_probe,
        mock_audit_trail,
    ):
        mock_invitation_repository.has_live_invitation.return_value = True

        with pytest.raises(DuplicatePendingInvitationError):
            await service.create_invitation(
                owner.id, "dup@example.com", RoleSlug.TENANT_EDITOR, tenant.id, session_context
            )

        mock_probe.invitation_operation_rejected.assert_called_once_with(
            "create", "duplicate_pending_invitation"
        )
        mock_audit_trail.record.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rejects_registered_email(
        self, service, owner, tenant, session_context, mock_user_repository, make_user
    ):
        mock_user_repository.get_by_email.return_value = make_user(RoleSlug.TENANT_VIEWER, tenant)

        with pytest.raises(EmailAlreadyInUseError):
            await service.create_invitation(
                owner.id, "taken@example.com", RoleSlug.TENANT_EDITOR, tenant.id, session_context
            )

    @pytest.mark.asyncio
    async def test_admin_cannot_invite_owner(
        self, service, make_user, users, tenant, session_context, mock_mailer
    ):
        admin = make_user(RoleSlug.TENANT_ADMIN, tenant)
        users[admin.id] = admin

        with pytest.raises(ForbiddenError):
            await service.create_invitation(
                admin.id, "boss@example.com", RoleSlug.TENANT_OWNER, tenant.id, session_context
            )
        mock_mailer.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_viewer_cannot_invite(self, service, make_user, users, tenant, session_context):
        viewer = make_user(RoleSlug.TENANT_VIEWER, tenant)
        users[viewer.id] = viewer

        with pytest.raises(ForbiddenError):
            await service.create_invitation(
                viewer.id, "x@example.com", RoleSlug.TENANT_VIEWER, tenant.id, session_context
            )

    @pytest.mark.asyncio
    async def test_tenant_owner_cannot_invite_platform_staff(
        self, service, owner, session_context
    ):
        with pytest.raises(PlatformAdminShieldedError):
            await service.create_invitation(
                owner.id, "x@example.com", RoleSlug.PLATFORM_SUPER_ADMIN, None, session_context
            )

    @pytest.mark.asyncio
    async def test_platform_staff_invite_consumes_no_seat(
        self, service, super_admin, session_context, mock_user_repository, mock_mailer
    ):
        invitation = await service.create_invitation(
            super_admin.id,
            "staff@example.com",
            RoleSlug.PLATFORM_SUPER_ADMIN,
            None,
            session_context,
        )

        assert invitation.tenant_id is None
        mock_user_repository.count_active.assert_not_awaited()
        message = mock_mailer.send.await_args.args[0]
        assert message.subject == (
            "Your invitation to join as Platform Super Admin on Back Office"
        )

    @pytest.mark.asyncio
    async def test_mail_failure_propagates_without_audit(
        self, service, owner, tenant, session_context, mock_mailer, mock_audit_trail
    ):
        mock_mailer.send.side_effect = MailDispatchError("smtp down")

        with pytest.raises(MailDispatchError):
            await service.create_invitation(
                owner.id, "x@example.com", RoleSlug.TENANT_EDITOR, tenant.id, session_context
            )
        mock_audit_trail.record.assert_not_awaited()


class TestResendInvitation:
    """Tests for resend_invitation, including the cooldown."""

    @pytest.mark.asyncio
    async def test_within_cooldown_sends_nothing(
        self,
        service,
        owner,
        sent_invitation,
        session_context,
        clock,
        mock_mailer,
        mock_invitation_repository,
        mock_audit_trail,
        mock_probe,
    ):
        clock.advance(timedelta(minutes=1))

        with pytest.raises(CooldownActiveError) as exc_info:
            await service.resend_invitation(owner.id, sent_invitation.id, session_context)

        assert exc_info.value.seconds_left == 240
        assert sent_invitation.send_count == 1
        mock_mailer.send.assert_not_awaited()
        mock_invitation_repository.save.assert_not_awaited()
        mock_audit_trail.record.assert_not_awaited()
        mock_probe.resend_throttled.assert_called_once_with(sent_invitation.id.value, 240)

    @pytest.mark.asyncio
    async def test_after_cooldown_sends_and_counts(
        self,
        service,
        owner,
        sent_invitation,
        session_context,
        clock,
        mock_mailer,
        mock_audit_trail,
    ):
        clock.advance(timedelta(minutes=1))
        with pytest.raises(CooldownActiveError):
            await service.resend_invitation(owner.id, sent_invitation.id, session_context)

        clock.advance(timedelta(minutes=5))
        result = await service.resend_invitation(owner.id, sent_invitation.id, session_context)

        assert result.send_count == 2
        assert result.last_sent_at == clock.now()
        assert result.expires_at == clock.now() + TTL
        mock_mailer.send.assert_awaited_once()

        [entry] = _recorded_entries(mock_audit_trail)
        assert entry.action == "invite.resent"
        assert entry.meta["changes"]["send_count"] == {"old": 1, "new": 2}
        assert entry.meta["reopened"] is False

    @pytest.mark.asyncio
    async def test_two_resends_in_one_window_dispatch_once(
        self, service, owner, sent_invitation, session_context, clock, mock_mailer
    ):
        clock.advance(timedelta(minutes=6))
        await service.resend_invitation(owner.id, sent_invitation.id, session_context)
        clock.advance(timedelta(minutes=1))

        with pytest.raises(CooldownActiveError):
            await service.resend_invitation(owner.id, sent_invitation.id, session_context)

        assert mock_mailer.send.await_count == 1
        assert sent_invitation.send_count == 2

    @pytest.mark.asyncio
    async def test_reopens_expired_invitation_with_new_token(
        self, service, owner, sent_invitation, session_context, clock, mock_mailer, mock_probe
    ):
        old_token = sent_invitation.token
        clock.advance(TTL + timedelta(hours=1))

        result = await service.resend_invitation(owner.id, sent_invitation.id, session_context)

        assert result.status == InvitationStatus.PENDING
        assert result.token != old_token
        assert result.token in mock_mailer.send.await_args.args[0].accept_url
        mock_probe.invitation_resent.assert_called_once_with(
            invitation_id=sent_invitation.id.value, reopened=True, send_count=2
        )

    @pytest.mark.asyncio
    async def test_reopen_checks_other_live_invitations(
        self,
        service,
        owner,
        sent_invitation,
        session_context,
        clock,
        mock_mailer,
        mock_invitation_repository,
        mock_audit_trail,
    ):
        sent_invitation.cancel(clock.now())
        clock.advance(timedelta(minutes=10))
        mock_invitation_repository.has_live_invitation.return_value = True

        with pytest.raises(DuplicatePendingInvitationError):
            await service.resend_invitation(owner.id, sent_invitation.id, session_context)

        mock_invitation_repository.has_live_invitation.assert_awaited_once_with(
            sent_invitation.tenant_id,
            sent_invitation.email,
            clock.now(),
            exclude=sent_invitation.id,
        )
        mock_mailer.send.assert_not_awaited()
        mock_invitation_repository.save.assert_not_awaited()
        mock_audit_trail.record.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reopen_refuses_registered_email(
        self,
        service,
        owner,
        make_user,
        tenant,
        sent_invitation,
        session_context,
        clock,
        mock_mailer,
        mock_user_repository,
        mock_probe,
    ):
        sent_invitation.cancel(clock.now())
        clock.advance(timedelta(minutes=10))
        mock_user_repository.get_by_email.return_value = make_user(
            RoleSlug.TENANT_VIEWER, tenant, email=sent_invitation.email
        )

        with pytest.raises(EmailAlreadyInUseError):
            await service.resend_invitation(owner.id, sent_invitation.id, session_context)

        mock_mailer.send.assert_not_awaited()
        mock_probe.invitation_operation_rejected.assert_called_once_with(
            "resend", "email_in_use", sent_invitation.id.value
        )

    @pytest.mark.asyncio
    async def test_live_resend_skips_reopen_checks(
        self, service, owner, sent_invitation, session_context, clock, mock_invitation_repository
    ):
        clock.advance(timedelta(minutes=10))
        mock_invitation_repository.has_live_invitation.return_value = True

        result = await service.resend_invitation(owner.id, sent_invitation.id, session_context)

        assert result.send_count == 2
        mock_invitation_repository.has_live_invitation.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_accepted_invitation_is_rejected(
        self, service, owner, sent_invitation, session_context, clock, mock_probe
    ):
        sent_invitation.accept(clock.now())
        clock.advance(timedelta(hours=1))

        with pytest.raises(InvitationAlreadyAcceptedError):
            await service.resend_invitation(owner.id, sent_invitation.id, session_context)

        mock_probe.invitation_operation_rejected.assert_called_once_with(
            "resend", "already_accepted", sent_invitation.id.value
        )

    @pytest.mark.asyncio
    async def test_unknown_invitation(self, service, owner, session_context, sent_invitation):
        with pytest.raises(InvitationNotFoundError):
            await service.resend_invitation(owner.id, InvitationId.generate(), session_context)

    @pytest.mark.asyncio
    async def test_other_tenant_manager_is_rejected(
        self, service, make_user, users, sent_invitation, session_context, clock
    ):
        other_tenant = Tenant.create(name="Other", slug="other", seat_limit=2)
        outsider = make_user(RoleSlug.TENANT_OWNER, other_tenant)
        users[outsider.id] = outsider
        clock.advance(timedelta(minutes=10))

        with pytest.raises(CrossTenantForbiddenError):
            await service.resend_invitation(outsider.id, sent_invitation.id, session_context)


class TestCancelInvitation:
    """Tests for cancel_invitation idempotence."""

    @pytest.mark.asyncio
    async def test_cancel_twice_is_idempotent(
        self, service, owner, sent_invitation, session_context, clock, mock_audit_trail
    ):
        first = await service.cancel_invitation(owner.id, sent_invitation.id, session_context)
        state = first.snapshot()
        clock.advance(timedelta(minutes=1))
        second = await service.cancel_invitation(owner.id, sent_invitation.id, session_context)

        assert second.status == InvitationStatus.CANCELLED
        assert second.snapshot() == state
        [entry] = _recorded_entries(mock_audit_trail)
        assert entry.action == "invite.cancelled"
        assert entry.meta["changes"]["status"] == {"old": "pending", "new": "cancelled"}

    @pytest.mark.asyncio
    async def test_cancel_accepted_is_noop(
        self,
        service,
        owner,
        sent_invitation,
        session_context,
        clock,
        mock_audit_trail,
        mock_invitation_repository,
        mock_probe,
    ):
        sent_invitation.accept(clock.now())

        result = await service.cancel_invitation(owner.id, sent_invitation.id, session_context)

        assert result.status == InvitationStatus.ACCEPTED
        mock_invitation_repository.save.assert_not_awaited()
        mock_audit_trail.record.assert_not_awaited()
        mock_probe.invitation_cancelled.assert_called_once_with(
            sent_invitation.id.value, changed=False
        )


class TestAcceptInvitation:
    """Tests for accept_invitation."""

    @pytest.mark.asyncio
    async def test_full_tenant_rejects_and_keeps_invitation_pending(
        self,
        service,
        tenant,
        sent_invitation,
        session_context,
        mock_user_repository,
        mock_invitation_repository,
    ):
        tenant.seat_limit = 1
        mock_user_repository.count_active.return_value = 1

        with pytest.raises(SeatLimitReachedError):
            await service.accept_invitation(
                sent_invitation.token, "New Hire", "s3cret-pass", session_context
            )

        assert sent_invitation.status == InvitationStatus.PENDING
        mock_invitation_repository.mark_accepted_if_pending.assert_not_awaited()
        mock_user_repository.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_creates_active_user_and_audits_as_new_user(
        self,
        service,
        tenant,
        sent_invitation,
        session_context,
        mock_user_repository,
        mock_invitation_repository,
        mock_audit_trail,
        mock_tenant_repository,
    ):
        user = await service.accept_invitation(
            sent_invitation.token, "New Hire", "s3cret-pass", session_context
        )

        assert user.email == "new.hire@example.com"
        assert user.role == RoleSlug.TENANT_EDITOR
        assert user.tenant_id == tenant.id
        assert user.status == UserStatus.ACTIVE
        assert user.email_verified is True
        assert verify_password("s3cret-pass", user.password_hash)

        mock_tenant_repository.get_by_id.assert_awaited_with(tenant.id, for_update=True)
        mock_invitation_repository.mark_accepted_if_pending.assert_awaited_once()
        mock_user_repository.save.assert_awaited_once_with(user)

        [entry] = _recorded_entries(mock_audit_trail)
        assert entry.action == "invite.accepted"
        assert entry.actor_id == user.id.value
        assert "s3cret-pass" not in str(entry.meta)
        assert user.password_hash not in str(entry.meta)

    @pytest.mark.asyncio
    async def test_unknown_token(self, service, session_context, sent_invitation):
        with pytest.raises(InvalidOrExpiredInvitationError):
            await service.accept_invitation("nope", "X", "s3cret-pass", session_context)

    @pytest.mark.asyncio
    async def test_expired_token(self, service, session_context, sent_invitation, clock):
        clock.advance(TTL)
        with pytest.raises(InvalidOrExpiredInvitationError):
            await service.accept_invitation(
                sent_invitation.token, "X", "s3cret-pass", session_context
            )

    @pytest.mark.asyncio
    async def test_losing_concurrent_acceptance_sees_consumed_token(
        self,
        service,
        sent_invitation,
        session_context,
        mock_invitation_repository,
        mock_user_repository,
        mock_audit_trail,
    ):
        mock_invitation_repository.mark_accepted_if_pending.return_value = False

        with pytest.raises(InvalidOrExpiredInvitationError):
            await service.accept_invitation(
                sent_invitation.token, "X", "s3cret-pass", session_context
            )

        mock_user_repository.save.assert_not_awaited()
        mock_audit_trail.record.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_registered_email_consumes_invitation_then_fails(
        self,
        service,
        tenant,
        sent_invitation,
        session_context,
        mock_user_repository,
        mock_invitation_repository,
        make_user,
        mock_probe,
    ):
        mock_user_repository.get_by_email.return_value = make_user(
            RoleSlug.TENANT_VIEWER, tenant, email="new.hire@example.com"
        )

        with pytest.raises(EmailAlreadyInUseError):
            await service.accept_invitation(
                sent_invitation.token, "X", "s3cret-pass", session_context
            )

        mock_invitation_repository.mark_accepted_if_pending.assert_awaited_once()
        mock_user_repository.save.assert_not_awaited()
        mock_probe.invitation_accepted.assert_not_called()
        mock_probe.invitation_operation_rejected.assert_called_once_with(
            "accept", "email_in_use", sent_invitation.id.value
        )


class TestExpireStale:
    """Tests for the expiry sweep."""

    @pytest.fixture
    def stale(self, tenant, owner, t0, mock_invitation_repository):
        invitations = [
            Invitation.create(
                email=f"old{i}@example.com",
                role=RoleSlug.TENANT_VIEWER,
                tenant_id=tenant.id,
                invited_by=owner.id,
                token=f"tok{i}" + "b" * 60,
                now=t0 - TTL - timedelta(days=1),
                ttl=TTL,
            )
            for i in range(2)
        ]
        mock_invitation_repository.list_expired_pending.return_value = invitations
        return invitations

    @pytest.mark.asyncio
    async def test_dry_run_changes_nothing(
        self, service, stale, mock_invitation_repository, mock_audit_trail, mock_probe
    ):
        result = await service.expire_stale(dry_run=True)

        assert result == stale
        assert all(i.status == InvitationStatus.PENDING for i in stale)
        mock_invitation_repository.save.assert_not_awaited()
        mock_audit_trail.record.assert_not_awaited()
        mock_probe.invitations_expired.assert_called_once_with(count=2, dry_run=True)

    @pytest.mark.asyncio
    async def test_expires_and_audits_as_system(
        self, service, stale, mock_invitation_repository, mock_audit_trail, clock
    ):
        await service.expire_stale()

        mock_invitation_repository.list_expired_pending.assert_awaited_once_with(
            clock.now(), for_update=True
        )
        assert all(i.status == InvitationStatus.EXPIRED for i in stale)
        entries = _recorded_entries(mock_audit_trail)
        assert [e.action for e in entries] == ["invite.expired", "invite.expired"]
        assert all(e.actor_id is None for e in entries)
        assert all(e.meta["request"]["source"] == "job" for e in entries)


class TestListInvitations:
    """Tests for list_invitations visibility."""

    @pytest.mark.asyncio
    async def test_super_admin_lists_all_tenants(
        self, service, super_admin, mock_invitation_repository, clock
    ):
        await service.list_invitations(super_admin.id)

        mock_invitation_repository.list_invitations.assert_awaited_once_with(
            tenant_id=None,
            status=InvitationStatus.PENDING,
            now=clock.now(),
            all_tenants=True,
        )

    @pytest.mark.asyncio
    async def test_manager_lists_own_tenant(
        self, service, owner, tenant, mock_invitation_repository, clock
    ):
        await service.list_invitations(owner.id, status=None)

        mock_invitation_repository.list_invitations.assert_awaited_once_with(
            tenant_id=tenant.id, status=None, now=clock.now()
        )

    @pytest.mark.asyncio
    async def test_editor_is_rejected(
        self, service, make_user, users, tenant, mock_invitation_repository
    ):
        editor = make_user(RoleSlug.TENANT_EDITOR, tenant)
        users[editor.id] = editor

        with pytest.raises(ForbiddenError):
            await service.list_invitations(editor.id)
        mock_invitation_repository.list_invitations.assert_not_awaited()
