"""PostgreSQL implementation of IInvitationRepository."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import and_, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from access.domain.aggregates import Invitation, normalize_email
from access.domain.roles import get_role
from access.domain.value_objects import (
    InvitationId,
    InvitationStatus,
    TenantId,
    UserId,
)
from access.infrastructure.models import InvitationModel
from access.infrastructure.observability import (
    DefaultInvitationRepositoryProbe,
    InvitationRepositoryProbe,
)
from access.ports.repositories import IInvitationRepository


def _not_expired(now: datetime) -> ColumnElement[bool]:
    return or_(InvitationModel.expires_at.is_(None), InvitationModel.expires_at > now)


def _live(now: datetime) -> ColumnElement[bool]:
    return and_(
        InvitationModel.status == InvitationStatus.PENDING.value,
        _not_expired(now),
    )


def _effective_status(status: InvitationStatus, now: datetime) -> ColumnElement[bool]:
    if status == InvitationStatus.PENDING:
        return _live(now)
    if status == InvitationStatus.EXPIRED:
        return or_(
            InvitationModel.status == InvitationStatus.EXPIRED.value,
            and_(
                InvitationModel.status == InvitationStatus.PENDING.value,
                InvitationModel.expires_at <= now,
            ),
        )
    return InvitationModel.status == status.value


class InvitationRepository(IInvitationRepository):
    """Repository managing PostgreSQL storage for Invitation aggregates."""

    def __init__(
        self,
        session: AsyncSession,
        probe: InvitationRepositoryProbe | None = None,
    ) -> None:
        """Initialize repository with database session.

        Args:
            session: AsyncSession shared with the calling service
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultInvitationRepositoryProbe()

    async def save(self, invitation: Invitation) -> None:
        """Persist an invitation to PostgreSQL."""
        stmt = select(InvitationModel).where(
            InvitationModel.id == invitation.id.value
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model:
            model.token = invitation.token
            model.status = invitation.status.value
            model.expires_at = invitation.expires_at
            model.last_sent_at = invitation.last_sent_at
            model.send_count = invitation.send_count
            model.role_id = get_role(invitation.role).id
        else:
            model = InvitationModel(
                id=invitation.id.value,
                tenant_id=invitation.tenant_id.value if invitation.tenant_id else None,
                email=invitation.email,
                role_id=get_role(invitation.role).id,
                token=invitation.token,
                status=invitation.status.value,
                expires_at=invitation.expires_at,
                invited_by=invitation.invited_by.value if invitation.invited_by else None,
                last_sent_at=invitation.last_sent_at,
                send_count=invitation.send_count,
            )
            self._session.add(model)

        await self._session.flush()
        self._probe.invitation_saved(invitation.id.value, invitation.status.value)

    async def get_by_id(
        self, invitation_id: InvitationId, for_update: bool = False
    ) -> Invitation | None:
        """Fetch an invitation, optionally locking its row."""
        stmt = select(InvitationModel).where(InvitationModel.id == invitation_id.value)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model else None

    async def get_acceptable_by_token(
        self, token: str, now: datetime
    ) -> Invitation | None:
        """Fetch a pending, unexpired invitation by token."""
        stmt = select(InvitationModel).where(
            InvitationModel.token == token,
            _live(now),
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model else None

    async def has_live_invitation(
        self,
        tenant_id: TenantId | None,
        email: str,
        now: datetime,
        exclude: InvitationId | None = None,
    ) -> bool:
        """Whether a pending, unexpired invitation exists for tenant + email.

        ``exclude`` leaves one invitation out of the check (the one being
        reopened).
        """
        if tenant_id is None:
            tenant_condition = InvitationModel.tenant_id.is_(None)
        else:
            tenant_condition = InvitationModel.tenant_id == tenant_id.value
        stmt = (
            select(InvitationModel.id)
            .where(
                tenant_condition,
                InvitationModel.email == normalize_email(email),
                _live(now),
            )
            .limit(1)
        )
        if exclude is not None:
            stmt = stmt.where(InvitationModel.id != exclude.value)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def mark_accepted_if_pending(
        self, invitation_id: InvitationId, now: datetime
    ) -> bool:
        """Conditionally flip a pending invitation to accepted."""
        stmt = (
            update(InvitationModel)
            .where(
                InvitationModel.id == invitation_id.value,
                InvitationModel.status == InvitationStatus.PENDING.value,
            )
            .values(status=InvitationStatus.ACCEPTED.value, expires_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        if result.rowcount != 1:
            self._probe.acceptance_conflict(invitation_id.value)
            return False
        return True

    async def list_expired_pending(
        self, now: datetime, for_update: bool = False
    ) -> list[Invitation]:
        """List pending invitations whose expires_at has passed."""
        stmt = (
            select(InvitationModel)
            .where(
                InvitationModel.status == InvitationStatus.PENDING.value,
                InvitationModel.expires_at.is_not(None),
                InvitationModel.expires_at <= now,
            )
            .order_by(InvitationModel.expires_at)
        )
        if for_update:
            stmt = stmt.with_for_update(skip_locked=True)
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def list_invitations(
        self,
        tenant_id: TenantId | None,
        status: InvitationStatus | None,
        now: datetime,
        all_tenants: bool = False,
    ) -> list[Invitation]:
        """List invitations, newest first."""
        stmt = select(InvitationModel).order_by(InvitationModel.created_at.desc())
        if not all_tenants:
            if tenant_id is None:
                stmt = stmt.where(InvitationModel.tenant_id.is_(None))
            else:
                stmt = stmt.where(InvitationModel.tenant_id == tenant_id.value)
        if status is not None:
            stmt = stmt.where(_effective_status(status, now))
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    @staticmethod
    def _to_domain(model: InvitationModel) -> Invitation:
        return Invitation(
            id=InvitationId(value=model.id),
            email=model.email,
            role=get_role(model.role_id).slug,
            tenant_id=TenantId(value=model.tenant_id) if model.tenant_id else None,
            token=model.token,
            expires_at=model.expires_at,
            invited_by=UserId(value=model.invited_by) if model.invited_by else None,
            status=InvitationStatus(model.status),
            last_sent_at=model.last_sent_at,
            send_count=model.send_count,
            created_at=model.created_at,
        )
