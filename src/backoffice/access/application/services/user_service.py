"""User application service for the Access bounded context.

Orchestrates role changes, status changes and direct user creation. Each
operation evaluates the policy, enforces the data invariants and appends its
audit entry in a single transaction.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from access.application.observability import (
    DefaultUserServiceProbe,
    UserServiceProbe,
)
from access.application.security import hash_password
from access.application.services.common import (
    load_actor,
    require_tenant,
    require_user,
    seat_usage_of,
)
from access.domain.aggregates import User, normalize_email
from access.domain.policy import (
    Action,
    ResourceKind,
    ResourceTarget,
    UserTarget,
    evaluate,
)
from access.domain.role_assignment import (
    check_grant_ceiling,
    check_platform_grant,
    check_scope,
    guard_role_change,
)
from access.domain.roles import RoleSlug
from access.domain.value_objects import TenantId, UserId, UserStatus
from access.ports.exceptions import (
    AccessError,
    EmailAlreadyInUseError,
    NoChangeError,
    SelfChangeForbiddenError,
)
from access.ports.repositories import ITenantRepository, IUserRepository
from shared_kernel.audit import AuditAction, AuditOptions, IAuditTrail
from shared_kernel.clock import Clock, SystemClock
from shared_kernel.session import SessionContext


class UserService:
    """Application service for user administration."""

    def __init__(
        self,
        user_repository: IUserRepository,
        tenant_repository: ITenantRepository,
        audit_trail: IAuditTrail,
        session: AsyncSession,
        clock: Clock | None = None,
        audit_options: AuditOptions | None = None,
        probe: UserServiceProbe | None = None,
    ):
        """Initialize UserService with dependencies.

        Args:
            user_repository: Repository for user persistence
            tenant_repository: Repository for tenant row locks
            audit_trail: Audit trail bound to the same session
            session: Database session for transaction management
            clock: Source of the current instant
            audit_options: Audit enrichment and redaction options
            probe: Optional domain probe for observability
        """
        self._users = user_repository
        self._tenants = tenant_repository
        self._audit = audit_trail
        self._session = session
        self._clock = clock or SystemClock()
        self._audit_options = audit_options or AuditOptions()
        self._probe = probe or DefaultUserServiceProbe()

    async def change_user_role(
        self,
        actor_id: UserId,
        target_id: UserId,
        new_role: RoleSlug,
        context: SessionContext,
    ) -> User:
        """Assign a new role to a user.

        The target's tenant row is locked before the owner count is read, so
        two owners demoting each other cannot both pass the last-owner check.

        Args:
            actor_id: The acting user
            target_id: The user whose role changes
            new_role: Role to assign
            context: Request session

        Returns:
            The updated user

        Raises:
            UserNotFoundError: If the actor or target does not exist
            SelfChangeForbiddenError: If the actor targets themself
            ForbiddenError: If the policy denies the change or the role ranks
                above what the actor may grant
            ScopeMismatchError: If the role does not fit the user's tenant
            PlatformRoleAssignmentError: If the platform role is granted
                without authority
            LastOwnerViolationError: If the tenant would lose its last owner
            NoChangeError: If the user already holds the role
        """
        now = self._clock.now()
        try:
            async with self._session.begin():
                actor = await load_actor(self._users, actor_id)
                if actor.id == target_id:
                    raise SelfChangeForbiddenError()
                target = await require_user(self._users, target_id, for_update=True)

                evaluate(
                    actor, Action.UPDATE_ROLE, UserTarget.from_user(target)
                ).raise_if_denied()
                if target.role == new_role:
                    raise NoChangeError("The user already holds this role.")

                other_owners = 0
                if target.tenant_id is not None:
                    await self._tenants.get_by_id(target.tenant_id, for_update=True)
                    other_owners = await self._users.count_owners(
                        target.tenant_id, exclude=target.id
                    )

                before = target.snapshot()
                guard_role_change(
                    actor_role=actor.role,
                    current_role=target.role,
                    new_role=new_role,
                    target_tenant_id=target.tenant_id,
                    other_owner_count=other_owners,
                )
                previous = target.change_role(new_role)
                await self._users.save(target)

                entry = (
                    self._audit_options.builder(now)
                    .for_actor(actor.as_audit_actor())
                    .on("user", target.id)
                    .in_tenant(target.tenant_id)
                    .action(AuditAction.USER_ROLE_CHANGED)
                    .changes_from(before, target.snapshot(), only=("role",))
                    .with_session(context)
                    .build()
                )
                await self._audit.record(entry)
        except AccessError as e:
            self._probe.user_operation_rejected("change_role", e.code, target_id.value)
            raise

        self._probe.user_role_changed(target.id.value, previous.value, new_role.value)
        return target

    async def change_user_status(
        self,
        actor_id: UserId,
        target_id: UserId,
        new_status: UserStatus,
        context: SessionContext,
        reason: str | None = None,
    ) -> User:
        """Set a user's account status.

        Reactivating a tenant user takes a seat, so the seat check runs with
        the tenant row locked.

        Raises:
            UserNotFoundError: If the actor or target does not exist
            SelfChangeForbiddenError: If the actor targets themself
            ForbiddenError: If the policy denies the change
            NoChangeError: If the user already has the status
            SeatLimitReachedError: If reactivation finds no free seat
        """
        now = self._clock.now()
        try:
            async with self._session.begin():
                actor = await load_actor(self._users, actor_id)
                if actor.id == target_id:
                    raise SelfChangeForbiddenError()
                target = await require_user(self._users, target_id, for_update=True)

                evaluate(
                    actor, Action.UPDATE_STATUS, UserTarget.from_user(target)
                ).raise_if_denied()
                if target.status == new_status:
                    raise NoChangeError("The user already has this status.")

                if new_status == UserStatus.ACTIVE and target.tenant_id is not None:
                    tenant = await require_tenant(
                        self._tenants, target.tenant_id, for_update=True
                    )
                    usage = await seat_usage_of(self._users, tenant)
                    usage.ensure_seat_available()

                before = target.snapshot()
                previous = target.change_status(new_status)
                await self._users.save(target)

                builder = (
                    self._audit_options.builder(now)
                    .for_actor(actor.as_audit_actor())
                    .on("user", target.id)
                    .in_tenant(target.tenant_id)
                    .action(AuditAction.USER_STATUS_CHANGED)
                    .changes_from(before, target.snapshot(), only=("status",))
                    .with_session(context)
                )
                if reason:
                    builder.meta(reason=reason)
                await self._audit.record(builder.build())
        except AccessError as e:
            self._probe.user_operation_rejected("change_status", e.code, target_id.value)
            raise

        self._probe.user_status_changed(
            target.id.value, previous.value, new_status.value
        )
        return target

    async def create_user(
        self,
        actor_id: UserId,
        tenant_id: TenantId | None,
        email: str,
        name: str,
        password: str,
        role: RoleSlug,
        context: SessionContext,
    ) -> User:
        """Create an active user directly, without an invitation.

        Raises:
            ForbiddenError: If the actor may not create this user
            ScopeMismatchError: If role and tenant binding disagree
            PlatformRoleAssignmentError: If the platform role is granted
                without authority
            TenantNotFoundError: If the tenant does not exist
            EmailAlreadyInUseError: If the address is already registered
            SeatLimitReachedError: If the tenant has no free seat
        """
        password_hash = hash_password(password)
        now = self._clock.now()
        try:
            async with self._session.begin():
                actor = await load_actor(self._users, actor_id)
                evaluate(
                    actor, Action.CREATE_USER, UserTarget(None, role, tenant_id)
                ).raise_if_denied()
                check_scope(role, tenant_id)
                check_platform_grant(actor.role, role, tenant_id)
                check_grant_ceiling(actor.role, role)

                if await self._users.get_by_email(normalize_email(email)) is not None:
                    raise EmailAlreadyInUseError()

                if tenant_id is not None:
                    tenant = await require_tenant(self._tenants, tenant_id, for_update=True)
                    usage = await seat_usage_of(self._users, tenant)
                    usage.ensure_seat_available()

                user = User.create(
                    email=email,
                    name=name,
                    role=role,
                    tenant_id=tenant_id,
                    password_hash=password_hash,
                    status=UserStatus.ACTIVE,
                )
                await self._users.save(user)

                entry = (
                    self._audit_options.builder(now)
                    .for_actor(actor.as_audit_actor())
                    .on("user", user.id)
                    .in_tenant(tenant_id)
                    .action(AuditAction.USER_CREATED)
                    .changes_from(
                        {},
                        {**user.snapshot(), "password_hash": user.password_hash},
                    )
                    .with_session(context)
                    .build()
                )
                await self._audit.record(entry)
        except AccessError as e:
            self._probe.user_operation_rejected("create", e.code)
            raise

        self._probe.user_created(
            user.id.value, tenant_id.value if tenant_id else None, role.value
        )
        return user

    async def list_users(
        self, actor_id: UserId, tenant_id: TenantId | None = None
    ) -> list[User]:
        """List the users of a tenant visible to the actor.

        Tenant actors see their own tenant; platform super admins see any
        tenant, or platform staff when ``tenant_id`` is None.

        Raises:
            ForbiddenError: If the actor is not active
        """
        try:
            async with self._session.begin():
                actor = await load_actor(self._users, actor_id)
                scope = tenant_id if actor.is_platform_super_admin else actor.tenant_id
                evaluate(
                    actor, Action.VIEW_USERS, ResourceTarget(ResourceKind.TENANT, scope)
                ).raise_if_denied()
                return await self._users.list_by_tenant(scope)
        except AccessError as e:
            self._probe.user_operation_rejected("list", e.code)
            raise
