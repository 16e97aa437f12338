"""Configuration management with Pydantic Settings.

Environment variables are loaded from:
1. Environment variables (highest priority)
2. .env file (development)
3. Defaults (lowest priority)
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Deployment environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Logging level."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Logging format."""

    JSON = "json"
    TEXT = "text"


def default_storage_path() -> Path:
    return Path.home() / ".kubeconfig-updater" / "local_storage.json"


class ClusterServiceSettings(BaseSettings):
    """Backend kubeconfig service connection."""

    model_config = SettingsConfigDict(env_prefix="KUBECONFIG_SERVICE_")

    url: str = Field(
        default="http://localhost:10980",
        description="Backend service base URL",
    )
    timeout_seconds: float = Field(default=10.0, gt=0, description="Request timeout")
    connect_timeout_seconds: float = Field(default=5.0, gt=0, description="Connect timeout")


class StorageSettings(BaseSettings):
    """Local key-value storage."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    path: Path = Field(
        default_factory=default_storage_path,
        description="JSON file backing the local key-value store",
    )


class SyncSettings(BaseSettings):
    """Cluster metadata synchronization."""

    model_config = SettingsConfigDict(env_prefix="SYNC_")

    resync_interval_minutes: int = Field(
        default=5,
        ge=0,
        description="Minutes before cached metadata is considered stale",
    )
    auto_refresh_seconds: int = Field(
        default=0,
        ge=0,
        description="Periodic refresh interval (0 disables the timer)",
    )
    refresh_on_start: bool = Field(default=True, description="Refresh once on start-up")


class NotificationSettings(BaseSettings):
    """Transient notification queue."""

    model_config = SettingsConfigDict(env_prefix="NOTIFICATION_")

    max_entries: int = Field(default=10, ge=1, description="Maximum queued notifications")


class Settings(BaseSettings):
    """Main application settings.

    All settings can be overridden via environment variables.
    For nested settings, use the appropriate prefix (e.g., SYNC_RESYNC_INTERVAL_MINUTES).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="kubeconfig-updater", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        alias="ENV",
        description="Deployment environment",
    )

    # Logging configuration
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    log_format: LogFormat = Field(default=LogFormat.TEXT, description="Logging format")

    # Nested settings
    cluster_service: ClusterServiceSettings = Field(default_factory=ClusterServiceSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: object) -> object:
        """Accept lowercase level names."""
        if isinstance(v, str):
            return v.upper()
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == Environment.PRODUCTION


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses LRU cache to avoid re-parsing environment variables.
    """
    return Settings()
