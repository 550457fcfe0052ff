"""
Configuration settings for the retrying transport.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Transport settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"
    TRANSPORT_LOG_LEVEL: str | None = None  # overrides LOG_LEVEL for roundtrip_retry loggers only

    # === Retry Loop ===
    BODY_DRAIN_LIMIT: int = Field(default=4096, gt=0)  # bytes discarded per rejected response

    # === Default Retryer ===
    DEFAULT_MAX_ATTEMPTS: int = Field(default=3, ge=1)
    DEFAULT_RETRY_STATUSES: list[int] = [429, 502, 503, 504]

    # === Client Factories ===
    HTTP_TIMEOUT: float = 30.0  # seconds

    # === Monitoring ===
    METRICS_ENABLED: bool = True


# Global settings instance
settings = Settings()
