"""Unit tests for the user, tenant and impersonation domain probes."""

from unittest.mock import Mock

from access.application.observability import (
    DefaultImpersonationProbe,
    DefaultTenantServiceProbe,
    DefaultUserServiceProbe,
)


class TestDefaultUserServiceProbe:
    """Tests for DefaultUserServiceProbe."""

    def test_role_change(self):
        mock_logger = Mock()
        probe = DefaultUserServiceProbe(logger=mock_logger)

        probe.user_role_changed("01HUSER", "tenant_owner", "tenant_admin")

        call_args = mock_logger.info.call_args
        assert call_args[0][0] == "user_role_changed"
        assert call_args[1]["old_role"] == "tenant_owner"
        assert call_args[1]["new_role"] == "tenant_admin"

    def test_rejection(self):
        mock_logger = Mock()
        probe = DefaultUserServiceProbe(logger=mock_logger)

        probe.user_operation_rejected("change_role", "last_owner", "01HUSER")

        call_args = mock_logger.warning.call_args
        assert call_args[0][0] == "user_operation_rejected"
        assert call_args[1]["code"] == "last_owner"
        assert call_args[1]["user_id"] == "01HUSER"


class TestDefaultTenantServiceProbe:
    """Tests for DefaultTenantServiceProbe."""

    def test_seat_limit_updated(self):
        mock_logger = Mock()
        probe = DefaultTenantServiceProbe(logger=mock_logger)

        probe.seat_limit_updated("01HTEN", 2, 10)

        call_args = mock_logger.info.call_args
        assert call_args[0][0] == "seat_limit_updated"
        assert (call_args[1]["old_limit"], call_args[1]["new_limit"]) == (2, 10)

    def test_seat_upgrade_requested(self):
        mock_logger = Mock()
        probe = DefaultTenantServiceProbe(logger=mock_logger)

        probe.seat_upgrade_requested("01HTEN", 2, 8)

        call_args = mock_logger.info.call_args
        assert call_args[0][0] == "seat_upgrade_requested"
        assert call_args[1]["tenant_id"] == "01HTEN"
        assert (call_args[1]["current_limit"], call_args[1]["requested_limit"]) == (2, 8)


class TestDefaultImpersonationProbe:
    """Impersonation is logged at warning level so it stands out."""

    def test_started_is_a_warning(self):
        mock_logger = Mock()
        probe = DefaultImpersonationProbe(logger=mock_logger)

        probe.impersonation_started("01HSTAFF", "01HUSER")

        mock_logger.warning.assert_called_once()
        call_args = mock_logger.warning.call_args
        assert call_args[0][0] == "impersonation_started"
        assert call_args[1]["impersonator_id"] == "01HSTAFF"
        assert call_args[1]["target_id"] == "01HUSER"

    def test_ended(self):
        mock_logger = Mock()
        probe = DefaultImpersonationProbe(logger=mock_logger)

        probe.impersonation_ended("01HSTAFF", "01HUSER")

        assert mock_logger.info.call_args[0][0] == "impersonation_ended"
