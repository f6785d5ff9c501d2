"""Unit tests for the invitation service domain probe."""

from unittest.mock import Mock

from access.application.observability import DefaultInvitationServiceProbe
from shared_kernel.observability_context import ObservationContext


class TestDefaultInvitationServiceProbe:
    """Tests for DefaultInvitationServiceProbe."""

    def test_creates_with_default_logger(self):
        """Test that probe can be created without providing a logger."""
        probe = DefaultInvitationServiceProbe()
        assert probe._logger is not None

    def test_invitation_created(self):
        mock_logger = Mock()
        probe = DefaultInvitationServiceProbe(logger=mock_logger)

        probe.invitation_created(
            invitation_id="01HINV", tenant_id="01HTEN", role="tenant_editor", seats_available=0
        )

        mock_logger.info.assert_called_once()
        call_args = mock_logger.info.call_args
        assert call_args[0][0] == "invitation_created"
        assert call_args[1]["invitation_id"] == "01HINV"
        assert call_args[1]["seats_available"] == 0

    def test_resend_throttled(self):
        mock_logger = Mock()
        probe = DefaultInvitationServiceProbe(logger=mock_logger)

        probe.resend_throttled("01HINV", 240)

        call_args = mock_logger.info.call_args
        assert call_args[0][0] == "invitation_resend_throttled"
        assert call_args[1]["seconds_left"] == 240

    def test_rejection_is_a_warning(self):
        mock_logger = Mock()
        probe = DefaultInvitationServiceProbe(logger=mock_logger)

        probe.invitation_operation_rejected("accept", "invalid_or_expired")

        mock_logger.warning.assert_called_once()
        call_args = mock_logger.warning.call_args
        assert call_args[1]["operation"] == "accept"
        assert call_args[1]["code"] == "invalid_or_expired"


class TestWithContext:
    """Tests for context binding."""

    def test_context_is_added_to_every_event(self):
        mock_logger = Mock()
        context = ObservationContext(request_id="req-1", actor_id="01HACTOR")
        probe = DefaultInvitationServiceProbe(logger=mock_logger).with_context(context)

        probe.invitations_expired(count=3, dry_run=False)

        call_args = mock_logger.info.call_args
        assert call_args[1]["request_id"] == "req-1"
        assert call_args[1]["actor_id"] == "01HACTOR"
        assert "tenant_id" not in call_args[1]

    def test_with_context_keeps_logger(self):
        mock_logger = Mock()
        probe = DefaultInvitationServiceProbe(logger=mock_logger)

        bound = probe.with_context(ObservationContext(request_id="r"))

        assert isinstance(bound, DefaultInvitationServiceProbe)
        assert bound._logger is mock_logger
