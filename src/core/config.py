"""
Configuration management using Pydantic Settings.

Type-safe, validated configuration loaded from environment variables (and an
optional ``.env`` file). Every setting has a default so the pipeline runs
in-process without any external service configured.

Architecture:
- Flat Settings structure (no nesting)
- All config loaded from environment variables
- Type validation via Pydantic

Usage:
    from src.core.config import get_settings

    settings = get_settings()
    timeout = settings.sync_write_timeout_seconds

    if settings.is_production:
        # JSON logs
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.core.enums import Environment


class Settings(BaseSettings):
    """
    Main application settings (flat structure).

    Configuration precedence:
        1. Environment variables
        2. ``.env`` file
        3. Default values

    Returns:
        Settings: Application configuration loaded from environment.
    """

    # Environment detection
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development, testing, ci, production)",
    )

    # Core application settings
    debug: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    log_json: bool | None = Field(
        default=None,
        description="Force JSON log rendering. Defaults to JSON outside development.",
    )

    # Application metadata
    app_name: str = Field(
        default="Clinical Compliance Pipeline",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )

    # Event bus
    events_strict_mode: bool = Field(
        default=False,
        description="Fail at startup if a registered event type has no handler wired",
    )

    # Audit trail
    audit_queue_max_size: int = Field(
        default=1000,
        description="Capacity of the non-blocking audit writer queue",
    )
    audit_database_url: str | None = Field(
        default=None,
        description="SQLAlchemy async URL for the audit store (in-memory store when unset)",
    )
    db_echo: bool = Field(
        default=False,
        description="Log all SQL issued by the audit store",
    )

    # Dual-store synchronization
    sync_write_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout applied to each partition write",
    )
    failed_sync_collection: str = Field(
        default="failedSyncs",
        description="General-store collection holding failed synchronization records",
    )

    # Validation
    max_field_length: int = Field(
        default=5000,
        description="Maximum length of any string value in a submitted form payload",
    )

    # Lifecycle role gates
    signature_min_role_level: int = Field(
        default=2,
        description="Minimum actor role level allowed to sign a form instance",
    )
    lock_min_role_level: int = Field(
        default=3,
        description="Minimum actor role level allowed to lock a form instance",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator(
        "audit_queue_max_size",
        "sync_write_timeout_seconds",
        "max_field_length",
    )
    @classmethod
    def validate_positive(cls, v: float) -> float:
        """
        Reject zero or negative sizes and timeouts.

        Args:
            v: Configured value.

        Returns:
            float: Validated value.

        Raises:
            ValueError: If value is not strictly positive.
        """
        if v <= 0:
            raise ValueError("value must be greater than 0")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Upper-case the log level and reject unknown names."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {v}")
        return level

    # Convenience properties for environment checks
    @property
    def is_development(self) -> bool:
        """
        Check if running in development environment.

        Returns:
            bool: True if environment is DEVELOPMENT, False otherwise.
        """
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_testing(self) -> bool:
        """
        Check if running in testing environment.

        Returns:
            bool: True if environment is TESTING, False otherwise.
        """
        return self.environment == Environment.TESTING

    @property
    def is_production(self) -> bool:
        """
        Check if running in production environment.

        Returns:
            bool: True if environment is PRODUCTION, False otherwise.
        """
        return self.environment == Environment.PRODUCTION

    @property
    def use_json_logs(self) -> bool:
        """JSON rendering unless explicitly disabled or running in development."""
        if self.log_json is not None:
            return self.log_json
        return not self.is_development


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once per process.

    Returns:
        Settings: Cached settings instance.
    """
    return Settings()
