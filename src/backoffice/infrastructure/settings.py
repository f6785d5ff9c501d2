"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from datetime import timedelta
from functools import lru_cache

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database connection settings.

    Environment variables:
        BACKOFFICE_DB_HOST: Database host (default: localhost)
        BACKOFFICE_DB_PORT: Database port (default: 5432)
        BACKOFFICE_DB_DATABASE: Database name (default: backoffice)
        BACKOFFICE_DB_USERNAME: Database user (default: backoffice)
        BACKOFFICE_DB_PASSWORD: Database password (required in production)
        BACKOFFICE_DB_POOL_MIN_CONNECTIONS: Minimum connections in pool (default: 2)
        BACKOFFICE_DB_POOL_MAX_CONNECTIONS: Maximum connections in pool (default: 10)
        BACKOFFICE_DB_ECHO: Log emitted SQL (default: false)
    """

    model_config = SettingsConfigDict(
        env_prefix="BACKOFFICE_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="backoffice", description="Database name")
    username: str = Field(default="backoffice", description="Database username")
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Database password",
    )
    pool_min_connections: int = Field(
        default=2,
        description="Minimum connections in pool",
        ge=1,
        le=100,
    )
    pool_max_connections: int = Field(
        default=10,
        description="Maximum connections in pool",
        ge=1,
        le=100,
    )
    echo: bool = Field(default=False, description="Log emitted SQL")

    @model_validator(mode="after")
    def validate_pool_settings(self) -> "DatabaseSettings":
        """Validate pool max >= min."""
        if self.pool_max_connections < self.pool_min_connections:
            raise ValueError(
                f"pool_max_connections ({self.pool_max_connections}) must be >= "
                f"pool_min_connections ({self.pool_min_connections})"
            )
        return self

    @property
    def connection_string(self) -> str:
        """Generate a connection string (without password for logging)."""
        return f"postgresql://{self.username}@{self.host}:{self.port}/{self.database}"


class AccessSettings(BaseSettings):
    """Tenant access settings: invitations and seats.

    Environment variables:
        BACKOFFICE_ACCESS_INVITATION_TTL_HOURS: Invitation lifetime (default: 168)
        BACKOFFICE_ACCESS_INVITATION_RESEND_COOLDOWN_MINUTES: Minimum gap
            between two sends of the same invitation (default: 5)
        BACKOFFICE_ACCESS_INVITATION_TOKEN_BYTES: Random bytes per token (default: 48)
        BACKOFFICE_ACCESS_DEFAULT_SEAT_LIMIT: Seats for new tenants (default: 2)
        BACKOFFICE_ACCESS_MAX_SEAT_LIMIT: Upper bound for any tenant (default: 10000)
        BACKOFFICE_ACCESS_INVITATION_ACCEPT_URL: Accept link template with a
            {token} placeholder
        BACKOFFICE_ACCESS_MAIL_FROM_NAME: Product name used in invitation mail
        BACKOFFICE_ACCESS_ENFORCE_SEATS_ON_INVITE: Reject invitations when the
            tenant has no free seat (default: false; acceptance always checks)
    """

    model_config = SettingsConfigDict(
        env_prefix="BACKOFFICE_ACCESS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    invitation_ttl_hours: int = Field(default=168, ge=1)
    invitation_resend_cooldown_minutes: int = Field(default=5, ge=0)
    invitation_token_bytes: int = Field(
        default=48,
        ge=40,
        le=96,
        description="Random bytes per invitation token",
    )
    default_seat_limit: int = Field(default=2, ge=1)
    max_seat_limit: int = Field(default=10000, ge=1)
    invitation_accept_url: str = Field(
        default="http://localhost:8000/invitations/{token}/accept",
        description="Accept link template",
    )
    mail_from_name: str = Field(default="Back Office")
    enforce_seats_on_invite: bool = Field(
        default=False,
        description="Also check seats when an invitation is created",
    )

    @field_validator("invitation_accept_url")
    @classmethod
    def validate_accept_url(cls, value: str) -> str:
        """Require a {token} placeholder in the accept link template."""
        if "{token}" not in value:
            raise ValueError("invitation_accept_url must contain '{token}'")
        return value

    @model_validator(mode="after")
    def validate_seat_limits(self) -> "AccessSettings":
        """Validate default seat limit <= max seat limit."""
        if self.default_seat_limit > self.max_seat_limit:
            raise ValueError(
                f"default_seat_limit ({self.default_seat_limit}) must be <= "
                f"max_seat_limit ({self.max_seat_limit})"
            )
        return self

    @property
    def invitation_ttl(self) -> timedelta:
        """Invitation lifetime as a timedelta."""
        return timedelta(hours=self.invitation_ttl_hours)

    @property
    def resend_cooldown(self) -> timedelta:
        """Resend cooldown as a timedelta."""
        return timedelta(minutes=self.invitation_resend_cooldown_minutes)


class AuditSettings(BaseSettings):
    """Audit trail settings.

    Environment variables:
        BACKOFFICE_AUDIT_REAUTH_WINDOW_MINUTES: How long a step-up counts as
            recent (default: 10)
        BACKOFFICE_AUDIT_EXTRA_SENSITIVE_KEYS: Additional key names to redact,
            as a JSON list (default: [])
    """

    model_config = SettingsConfigDict(
        env_prefix="BACKOFFICE_AUDIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    reauth_window_minutes: int = Field(default=10, ge=1)
    extra_sensitive_keys: list[str] = Field(default_factory=list)

    @field_validator("extra_sensitive_keys")
    @classmethod
    def normalize_keys(cls, value: list[str]) -> list[str]:
        """Lower-case and strip configured key names."""
        return [key.strip().lower() for key in value if key.strip()]

    @property
    def reauth_window(self) -> timedelta:
        """Re-authentication window as a timedelta."""
        return timedelta(minutes=self.reauth_window_minutes)


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(default="Back Office", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def database(self) -> DatabaseSettings:
        """Get database settings."""
        return get_database_settings()

    @property
    def access(self) -> AccessSettings:
        """Get access settings."""
        return get_access_settings()

    @property
    def audit(self) -> AuditSettings:
        """Get audit settings."""
        return get_audit_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return DatabaseSettings()


@lru_cache
def get_access_settings() -> AccessSettings:
    """Get cached access settings."""
    return AccessSettings()


@lru_cache
def get_audit_settings() -> AuditSettings:
    """Get cached audit settings."""
    return AuditSettings()
