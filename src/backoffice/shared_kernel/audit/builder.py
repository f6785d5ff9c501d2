"""Explicit builder for audit entries.

Use cases describe what happened; the builder adds the surrounding facts
(who, on behalf of whom, from where, whether the credential was recently
re-verified) and redacts sensitive values before anything reaches the trail.

Example:
    entry = (
        options.builder(now)
        .for_actor(actor.as_audit_actor())
        .on("user", target.id.value)
        .in_tenant(target.tenant_id.value)
        .action(AuditAction.USER_ROLE_CHANGED)
        .changes({"role": {"old": "tenant_viewer", "new": "tenant_admin"}})
        .with_session(session)
        .build()
    )
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, is_dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from shared_kernel.audit.redaction import DEFAULT_SENSITIVE_KEYS, redact
from shared_kernel.audit.value_objects import AuditActor, AuditEntry
from shared_kernel.session import SessionContext

DEFAULT_REAUTH_WINDOW = timedelta(minutes=10)

RESERVED_META_KEYS = frozenset(
    {"tenant_id", "actor", "impersonated", "request", "reauth", "changes"}
)


@dataclass(frozen=True)
class AuditOptions:
    """Deployment-level knobs for audit enrichment and redaction."""

    reauth_window: timedelta = DEFAULT_REAUTH_WINDOW
    sensitive_keys: frozenset[str] = DEFAULT_SENSITIVE_KEYS

    def builder(self, now: datetime) -> AuditEntryBuilder:
        """Start a builder evaluated at ``now``."""
        return AuditEntryBuilder(
            now=now,
            reauth_window=self.reauth_window,
            sensitive_keys=self.sensitive_keys,
        )


def to_json_value(value: Any) -> Any:
    """Normalize a value into something JSON can store.

    Identifier value objects collapse to their ``value``, enums to their value,
    datetimes to ISO-8601 strings.
    """
    if value is None or isinstance(value, bool | int | float):
        return value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, str):
        return value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(k): to_json_value(v) for k, v in value.items()}
    if isinstance(value, list | tuple | set | frozenset):
        return [to_json_value(v) for v in value]
    if is_dataclass(value) and hasattr(value, "value"):
        return to_json_value(value.value)
    return str(value)


def diff(
    before: Mapping[str, Any],
    after: Mapping[str, Any],
    only: Iterable[str] | None = None,
) -> dict[str, dict[str, Any]]:
    """Compute an ``{field: {"old": ..., "new": ...}}`` diff.

    Args:
        before: Field values before the mutation
        after: Field values after the mutation
        only: Restrict the diff to these fields (default: union of both)

    Returns:
        Changed fields only; unchanged fields are omitted
    """
    fields = list(only) if only is not None else sorted(set(before) | set(after))
    changes: dict[str, dict[str, Any]] = {}
    for name in fields:
        old = to_json_value(before.get(name))
        new = to_json_value(after.get(name))
        if old != new:
            changes[name] = {"old": old, "new": new}
    return changes


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


class AuditEntryBuilder:
    """Fluent builder producing enriched, redacted AuditEntry values.

    Every setter returns the builder. ``build()`` validates that an action and
    a subject were given.
    """

    def __init__(
        self,
        now: datetime,
        reauth_window: timedelta = DEFAULT_REAUTH_WINDOW,
        sensitive_keys: Iterable[str] = DEFAULT_SENSITIVE_KEYS,
    ):
        self._now = now
        self._reauth_window = reauth_window
        self._sensitive_keys = frozenset(sensitive_keys)
        self._actor: AuditActor | None = None
        self._subject_type: str | None = None
        self._subject_id: str | None = None
        self._tenant_id: str | None = None
        self._action: str | None = None
        self._changes: dict[str, Any] = {}
        self._extra: dict[str, Any] = {}
        self._overrides: dict[str, Any] = {}
        self._session: SessionContext | None = None

    def for_actor(self, actor: AuditActor | None) -> AuditEntryBuilder:
        """Set the actor; None records a system mutation."""
        self._actor = actor
        return self

    def on(self, subject_type: str, subject_id: Any) -> AuditEntryBuilder:
        """Set the subject the entry is about."""
        self._subject_type = subject_type
        self._subject_id = to_json_value(subject_id)
        return self

    def in_tenant(self, tenant_id: Any) -> AuditEntryBuilder:
        """Set the affected tenant (None for platform-level subjects)."""
        self._tenant_id = to_json_value(tenant_id)
        return self

    def action(self, action: str) -> AuditEntryBuilder:
        """Set the stable dotted action key."""
        self._action = str(action)
        return self

    def changes(self, changes: Mapping[str, Any]) -> AuditEntryBuilder:
        """Record an explicit ``{field: {"old", "new"}}`` diff."""
        self._changes.update(to_json_value(changes))
        return self

    def changes_from(
        self,
        before: Mapping[str, Any],
        after: Mapping[str, Any],
        only: Iterable[str] | None = None,
    ) -> AuditEntryBuilder:
        """Record the diff between two field snapshots."""
        self._changes.update(diff(before, after, only))
        return self

    def meta(self, **extra: Any) -> AuditEntryBuilder:
        """Add caller metadata.

        Raises:
            ValueError: If a key collides with an enrichment key. Use
                merge_meta() to override enrichment deliberately.
        """
        reserved = RESERVED_META_KEYS.intersection(extra)
        if reserved:
            raise ValueError(
                f"Reserved audit meta keys: {', '.join(sorted(reserved))}"
            )
        self._extra.update(to_json_value(extra))
        return self

    def merge_meta(self, overrides: Mapping[str, Any]) -> AuditEntryBuilder:
        """Deep-merge metadata over the enriched fields."""
        self._overrides = _deep_merge(self._overrides, to_json_value(overrides))
        return self

    def with_session(self, session: SessionContext) -> AuditEntryBuilder:
        """Attach the request session used for enrichment."""
        self._session = session
        return self

    def _enrichment(self) -> dict[str, Any]:
        session = self._session
        actor: dict[str, Any] | None = None
        if self._actor is not None:
            actor = {
                "id": self._actor.id,
                "role": to_json_value(self._actor.role),
                "tenant_id": self._actor.tenant_id,
                "impersonator_id": session.impersonator_id if session else None,
            }

        request: dict[str, Any] | None = None
        if session is not None:
            request = {
                "id": session.request_id,
                "ip": session.ip_address,
                "user_agent": session.user_agent,
                "source": session.source.value,
            }

        return {
            "tenant_id": self._tenant_id,
            "actor": actor,
            "impersonated": bool(session and session.is_impersonating),
            "request": request,
            "reauth": bool(
                session
                and session.recently_reauthenticated(self._now, self._reauth_window)
            ),
            "changes": dict(self._changes),
        }

    def build(self) -> AuditEntry:
        """Produce the entry.

        Raises:
            ValueError: If the action or subject has not been set
        """
        if self._action is None:
            raise ValueError("Audit entry requires an action")
        if self._subject_type is None or self._subject_id is None:
            raise ValueError("Audit entry requires a subject")

        meta = {**self._extra, **self._enrichment()}
        meta = _deep_merge(meta, self._overrides)

        return AuditEntry(
            actor_id=self._actor.id if self._actor else None,
            action=self._action,
            subject_type=self._subject_type,
            subject_id=self._subject_id,
            meta=redact(meta, self._sensitive_keys),
        )
