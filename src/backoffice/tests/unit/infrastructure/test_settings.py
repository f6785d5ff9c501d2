"""Unit tests for infrastructure settings."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from infrastructure.settings import AccessSettings, AuditSettings, DatabaseSettings


class TestDatabaseSettingsPoolConfiguration:
    """Tests for connection pool configuration."""

    def test_default_pool_settings(self):
        """Should have sensible pool defaults."""
        settings = DatabaseSettings()
        assert settings.pool_min_connections >= 1
        assert settings.pool_max_connections >= settings.pool_min_connections

    def test_pool_max_must_be_greater_than_or_equal_to_min(self):
        """Should validate max >= min."""
        with pytest.raises(ValidationError) as exc_info:
            DatabaseSettings(pool_min_connections=10, pool_max_connections=5)

        assert "pool_max_connections" in str(exc_info.value)

    def test_pool_min_must_be_positive(self):
        with pytest.raises(ValidationError):
            DatabaseSettings(pool_min_connections=0)

    def test_connection_string_hides_password(self):
        settings = DatabaseSettings(username="svc", password="hunter2", host="db", database="bo")
        assert settings.connection_string == "postgresql://svc@db:5432/bo"


class TestAccessSettings:
    """Tests for invitation and seat settings."""

    def test_defaults(self):
        settings = AccessSettings()
        assert settings.invitation_ttl == timedelta(hours=168)
        assert settings.resend_cooldown == timedelta(minutes=5)
        assert settings.invitation_token_bytes == 48
        assert settings.default_seat_limit == 2
        assert settings.enforce_seats_on_invite is False

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("BACKOFFICE_ACCESS_INVITATION_TTL_HOURS", "24")
        monkeypatch.setenv("BACKOFFICE_ACCESS_ENFORCE_SEATS_ON_INVITE", "true")

        settings = AccessSettings()

        assert settings.invitation_ttl == timedelta(hours=24)
        assert settings.enforce_seats_on_invite is True

    def test_accept_url_needs_token_placeholder(self):
        with pytest.raises(ValidationError):
            AccessSettings(invitation_accept_url="https://app.example.com/accept")

    def test_token_entropy_floor(self):
        with pytest.raises(ValidationError):
            AccessSettings(invitation_token_bytes=32)

    def test_default_seat_limit_within_max(self):
        with pytest.raises(ValidationError):
            AccessSettings(default_seat_limit=20, max_seat_limit=10)


class TestAuditSettings:
    def test_extra_keys_are_normalized(self):
        settings = AuditSettings(extra_sensitive_keys=[" SSN ", "", "iban"])
        assert settings.extra_sensitive_keys == ["ssn", "iban"]

    def test_reauth_window(self):
        assert AuditSettings(reauth_window_minutes=15).reauth_window == timedelta(minutes=15)
