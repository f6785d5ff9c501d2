"""Unit tests for AuditEntryBuilder enrichment, diffing and redaction."""

from datetime import UTC, datetime, timedelta
from enum import StrEnum

import pytest

from shared_kernel.audit import AuditAction, AuditActor, AuditOptions, REDACTED
from shared_kernel.audit.builder import AuditEntryBuilder, diff, to_json_value
from shared_kernel.session import (
    RequestSource,
    SessionContext,
    StepUpRecord,
    fingerprint_credential,
)

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
ACTOR = AuditActor(id="01HACTOR", role="tenant_owner", tenant_id="01HTENANT")


def _builder() -> AuditEntryBuilder:
    return (
        AuditOptions()
        .builder(NOW)
        .for_actor(ACTOR)
        .on("user", "01HUSER")
        .in_tenant("01HTENANT")
        .action(AuditAction.USER_ROLE_CHANGED)
    )


class TestDiff:
    """Tests for the snapshot diff helper."""

    def test_keeps_changed_fields_only(self):
        before = {"role": "tenant_owner", "name": "Ann"}
        after = {"role": "tenant_admin", "name": "Ann"}
        assert diff(before, after) == {
            "role": {"old": "tenant_owner", "new": "tenant_admin"}
        }

    def test_only_restricts_fields(self):
        before = {"role": "a", "status": "active"}
        after = {"role": "b", "status": "suspended"}
        assert set(diff(before, after, only=("status",))) == {"status"}

    def test_missing_fields_become_none(self):
        assert diff({}, {"seat_limit": 5}) == {"seat_limit": {"old": None, "new": 5}}


class TestToJsonValue:
    def test_normalizes_enums_datetimes_and_ids(self):
        class Color(StrEnum):
            RED = "red"

        from access.domain.value_objects import TenantId

        tenant_id = TenantId.generate()
        assert to_json_value(Color.RED) == "red"
        assert to_json_value(NOW) == NOW.isoformat()
        assert to_json_value({"t": tenant_id}) == {"t": tenant_id.value}
        assert to_json_value((1, 2)) == [1, 2]


class TestBuild:
    """Tests for build() validation and the entry shape."""

    def test_requires_action(self):
        builder = AuditOptions().builder(NOW).on("user", "01HUSER")
        with pytest.raises(ValueError, match="action"):
            builder.build()

    def test_requires_subject(self):
        builder = AuditOptions().builder(NOW).action("user.created")
        with pytest.raises(ValueError, match="subject"):
            builder.build()

    def test_entry_fields(self):
        entry = _builder().changes({"role": {"old": "a", "new": "b"}}).build()

        assert entry.actor_id == "01HACTOR"
        assert entry.action == "user.role_changed"
        assert entry.subject_type == "user"
        assert entry.subject_id == "01HUSER"
        assert entry.meta["changes"] == {"role": {"old": "a", "new": "b"}}

    def test_system_entry_has_no_actor(self):
        entry = (
            AuditOptions()
            .builder(NOW)
            .for_actor(None)
            .on("invitation", "01HINV")
            .action(AuditAction.INVITE_EXPIRED)
            .with_session(SessionContext.system())
            .build()
        )
        assert entry.actor_id is None
        assert entry.meta["actor"] is None
        assert entry.meta["request"]["source"] == RequestSource.JOB.value


class TestEnrichment:
    """Tests for the enriched meta keys."""

    def test_adds_actor_request_and_tenant(self):
        session = SessionContext(request_id="req-9", ip_address="198.51.100.1", user_agent="ua")

        meta = _builder().with_session(session).build().meta

        assert meta["tenant_id"] == "01HTENANT"
        assert meta["actor"] == {
            "id": "01HACTOR",
            "role": "tenant_owner",
            "tenant_id": "01HTENANT",
            "impersonator_id": None,
        }
        assert meta["request"] == {
            "id": "req-9",
            "ip": "198.51.100.1",
            "user_agent": "ua",
            "source": "api",
        }
        assert meta["impersonated"] is False
        assert meta["reauth"] is False

    def test_impersonation_names_real_actor(self):
        session = SessionContext(request_id="r").impersonating("01HSTAFF")

        meta = _builder().with_session(session).build().meta

        assert meta["impersonated"] is True
        assert meta["actor"]["impersonator_id"] == "01HSTAFF"

    def test_reauth_true_for_same_credential_within_window(self):
        fingerprint = fingerprint_credential("session-token-1")
        session = SessionContext(
            request_id="r",
            credential_fingerprint=fingerprint,
            step_up=StepUpRecord(fingerprint, NOW - timedelta(minutes=9)),
        )
        assert _builder().with_session(session).build().meta["reauth"] is True

    def test_reauth_false_for_other_credential(self):
        session = SessionContext(
            request_id="r",
            credential_fingerprint=fingerprint_credential("session-token-2"),
            step_up=StepUpRecord(fingerprint_credential("session-token-1"), NOW),
        )
        assert _builder().with_session(session).build().meta["reauth"] is False

    def test_reauth_false_after_window(self):
        fingerprint = fingerprint_credential("t")
        session = SessionContext(
            request_id="r",
            credential_fingerprint=fingerprint,
            step_up=StepUpRecord(fingerprint, NOW - timedelta(minutes=11)),
        )
        assert _builder().with_session(session).build().meta["reauth"] is False

    def test_window_is_configurable(self):
        fingerprint = fingerprint_credential("t")
        session = SessionContext(
            request_id="r",
            credential_fingerprint=fingerprint,
            step_up=StepUpRecord(fingerprint, NOW - timedelta(minutes=11)),
        )
        options = AuditOptions(reauth_window=timedelta(minutes=30))
        entry = (
            options.builder(NOW)
            .for_actor(ACTOR)
            .on("user", "u")
            .action("user.created")
            .with_session(session)
            .build()
        )
        assert entry.meta["reauth"] is True


class TestMeta:
    """Caller metadata and explicit overrides."""

    def test_meta_adds_keys(self):
        meta = _builder().meta(reason="policy breach").build().meta
        assert meta["reason"] == "policy breach"

    def test_meta_rejects_enrichment_keys(self):
        with pytest.raises(ValueError, match="actor"):
            _builder().meta(actor="someone else")

    def test_merge_meta_overrides_enrichment(self):
        meta = (
            _builder()
            .with_session(SessionContext(request_id="r"))
            .merge_meta({"request": {"source": "import"}})
            .build()
            .meta
        )
        assert meta["request"]["source"] == "import"
        assert meta["request"]["id"] == "r"


class TestRedaction:
    """Sensitive values never reach the entry."""

    def test_changes_are_redacted(self):
        entry = (
            _builder()
            .changes_from({"password_hash": None}, {"password_hash": "$2b$12$abc"})
            .build()
        )
        assert entry.meta["changes"]["password_hash"] == {"old": REDACTED, "new": REDACTED}
        assert "$2b$12$abc" not in str(entry.meta)

    def test_extra_meta_is_redacted(self):
        entry = _builder().meta(api_key="k-live-123").build()
        assert entry.meta["api_key"] == REDACTED

    def test_configured_keys_are_redacted(self):
        options = AuditOptions(sensitive_keys=frozenset({"password", "ssn"}))
        entry = options.builder(NOW).on("user", "u").action("user.created").meta(ssn="123").build()
        assert entry.meta["ssn"] == REDACTED
