"""Unit tests for SessionContext and ObservationContext."""

from datetime import UTC, datetime, timedelta

from shared_kernel.observability_context import ObservationContext
from shared_kernel.session import (
    RequestSource,
    SessionContext,
    StepUpRecord,
    fingerprint_credential,
)


class TestFingerprint:
    def test_is_stable_and_not_the_credential(self):
        fingerprint = fingerprint_credential("secret-session-token")
        assert fingerprint == fingerprint_credential("secret-session-token")
        assert "secret-session-token" not in fingerprint
        assert len(fingerprint) == 64


class TestSessionContext:
    """Tests for session helpers."""

    def test_system_session_is_a_job(self):
        session = SessionContext.system()
        assert session.source == RequestSource.JOB
        assert session.request_id
        assert session.ip_address is None

    def test_impersonation_round_trip(self):
        session = SessionContext(request_id="r")
        impersonating = session.impersonating("01HSTAFF")

        assert impersonating.is_impersonating
        assert not session.is_impersonating
        assert impersonating.without_impersonation() == session

    def test_no_step_up_means_no_reauth(self):
        session = SessionContext(request_id="r", credential_fingerprint="f")
        now = datetime(2024, 5, 1, tzinfo=UTC)
        assert not session.recently_reauthenticated(now, timedelta(minutes=10))

    def test_step_up_at_window_boundary_counts(self):
        now = datetime(2024, 5, 1, tzinfo=UTC)
        session = SessionContext(
            request_id="r",
            credential_fingerprint="f",
            step_up=StepUpRecord("f", now - timedelta(minutes=10)),
        )
        assert session.recently_reauthenticated(now, timedelta(minutes=10))


class TestObservationContext:
    def test_as_dict_omits_unset_fields(self):
        context = ObservationContext(request_id="r", tenant_id="t")
        data = context.as_dict()
        assert data["request_id"] == "r"
        assert data["tenant_id"] == "t"
        assert "actor_id" not in data
