"""Application settings and configuration management."""
from datetime import tzinfo
from typing import Literal, Optional
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict


class BackendSettings(BaseSettings):
    """Hosted relational backend (PostgREST-style HTTP API)."""

    url: str = "http://localhost:54321/rest/v1"
    api_key: str = ""
    request_timeout: int = 30
    max_retries: int = 3

    model_config = SettingsConfigDict(env_prefix="BACKEND_")


class RedisSettings(BaseSettings):
    """Redis configuration for the realtime room change channel."""

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    ssl: bool = False
    decode_responses: bool = True
    socket_timeout: int = 5
    socket_connect_timeout: int = 5
    channel: str = "roomboard:rooms"

    model_config = SettingsConfigDict(env_prefix="REDIS_")


class StorageSettings(BaseSettings):
    """Local JSON document storage."""

    path: str = "roomboard.json"
    rooms_key: str = "rooms"
    history_key: str = "history"
    transactions_key: str = "transactions"

    model_config = SettingsConfigDict(env_prefix="STORAGE_")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "json"

    model_config = SettingsConfigDict(env_prefix="LOG_")


class Settings(BaseSettings):
    """Main application settings."""

    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False

    store_backend: Literal["local", "remote"] = "local"
    revenue_source: Literal["ledger", "local"] = "ledger"
    timezone: str = ""  # IANA name, e.g. "Asia/Kolkata"; empty uses the system zone
    realtime_enabled: bool = False

    # Sub-settings
    backend: BackendSettings = BackendSettings()
    redis: RedisSettings = RedisSettings()
    storage: StorageSettings = StorageSettings()
    logging: LoggingSettings = LoggingSettings()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    def validate_remote(self) -> list[str]:
        """Validate required vars for the remote backend. Returns list of missing var names."""
        missing = []
        if not (self.backend.url or "").strip():
            missing.append("BACKEND_URL")
        if not (self.backend.api_key or "").strip():
            missing.append("BACKEND_API_KEY")
        return missing

    @property
    def local_tz(self) -> Optional[tzinfo]:
        """Configured reporting timezone, or None for the system local zone."""
        name = (self.timezone or "").strip()
        return ZoneInfo(name) if name else None


# Global settings instance
settings = Settings()
