"""Impersonation application service.

A privileged actor may act through another user's identity for support
purposes. The returned session carries the real actor as impersonator, so
every audit entry written during impersonation names both.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from access.application.observability import (
    DefaultImpersonationProbe,
    ImpersonationProbe,
)
from access.application.services.common import load_actor, require_user
from access.domain.policy import Action, UserTarget, evaluate
from access.domain.value_objects import UserId
from access.ports.exceptions import (
    AccessError,
    ImpersonationNotAllowedError,
    SelfChangeForbiddenError,
)
from access.ports.repositories import IUserRepository
from shared_kernel.audit import AuditAction, AuditOptions, IAuditTrail
from shared_kernel.clock import Clock, SystemClock
from shared_kernel.session import SessionContext


class ImpersonationService:
    """Starts and ends impersonation sessions."""

    def __init__(
        self,
        user_repository: IUserRepository,
        audit_trail: IAuditTrail,
        session: AsyncSession,
        clock: Clock | None = None,
        audit_options: AuditOptions | None = None,
        probe: ImpersonationProbe | None = None,
    ):
        self._users = user_repository
        self._audit = audit_trail
        self._session = session
        self._clock = clock or SystemClock()
        self._audit_options = audit_options or AuditOptions()
        self._probe = probe or DefaultImpersonationProbe()

    async def start(
        self,
        actor_id: UserId,
        target_id: UserId,
        context: SessionContext,
    ) -> SessionContext:
        """Begin impersonating ``target_id``.

        Args:
            actor_id: The real actor
            target_id: The user to act as
            context: The actor's current session

        Returns:
            A session acting as the target with the actor as impersonator

        Raises:
            ImpersonationNotAllowedError: If the session already impersonates
                or the target is not active
            SelfChangeForbiddenError: If the actor targets themself
            ForbiddenError: If the policy denies impersonating the target
        """
        now = self._clock.now()
        try:
            if context.is_impersonating:
                raise ImpersonationNotAllowedError(
                    message="End the current impersonation first."
                )
            if actor_id == target_id:
                raise SelfChangeForbiddenError()

            async with self._session.begin():
                actor = await load_actor(self._users, actor_id)
                target = await require_user(self._users, target_id)
                evaluate(
                    actor, Action.IMPERSONATE, UserTarget.from_user(target)
                ).raise_if_denied()
                if not target.is_active:
                    raise ImpersonationNotAllowedError(
                        message="Only active users can be impersonated."
                    )

                entry = (
                    self._audit_options.builder(now)
                    .for_actor(actor.as_audit_actor())
                    .on("user", target.id)
                    .in_tenant(target.tenant_id)
                    .action(AuditAction.IMPERSONATION_STARTED)
                    .meta(target_role=target.role)
                    .with_session(context)
                    .build()
                )
                await self._audit.record(entry)
        except AccessError as e:
            self._probe.impersonation_rejected(actor_id.value, e.code)
            raise

        self._probe.impersonation_started(actor_id.value, target_id.value)
        return context.impersonating(actor_id.value)

    async def stop(
        self, impersonated_id: UserId, context: SessionContext
    ) -> SessionContext:
        """End an impersonation session.

        The entry is attributed to the real actor, not the impersonated user.

        Args:
            impersonated_id: The user being impersonated
            context: The impersonating session

        Returns:
            The real actor's session

        Raises:
            ImpersonationNotAllowedError: If the session is not impersonating
        """
        if context.impersonator_id is None:
            self._probe.impersonation_rejected(
                impersonated_id.value, ImpersonationNotAllowedError.code
            )
            raise ImpersonationNotAllowedError(message="No impersonation is active.")

        impersonator_id = UserId(value=context.impersonator_id)
        restored = context.without_impersonation()
        now = self._clock.now()
        async with self._session.begin():
            actor = await load_actor(self._users, impersonator_id)
            target = await require_user(self._users, impersonated_id)
            entry = (
                self._audit_options.builder(now)
                .for_actor(actor.as_audit_actor())
                .on("user", target.id)
                .in_tenant(target.tenant_id)
                .action(AuditAction.IMPERSONATION_ENDED)
                .with_session(restored)
                .build()
            )
            await self._audit.record(entry)

        self._probe.impersonation_ended(impersonator_id.value, impersonated_id.value)
        return restored
