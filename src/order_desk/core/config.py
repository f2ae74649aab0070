"""Application configuration using pydantic-settings."""
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # REST backend - shared with the web frontend (VITE_ prefix for Vite exposure)
    api_url: str = Field(
        default="http://localhost:8000",
        validation_alias="VITE_API_URL",
    )

    # Seconds; unset means requests never time out
    api_timeout: float | None = Field(default=None, validation_alias="ORDER_DESK_API_TIMEOUT")

    # Durable key-value storage for token, user, language and theme
    storage_path: Path = Field(
        default=Path.home() / ".order-desk" / "storage.json",
        validation_alias="ORDER_DESK_STORAGE_PATH",
    )

    log_level: str = Field(default="INFO", validation_alias="ORDER_DESK_LOG_LEVEL")

    @field_validator("api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Endpoint paths start with '/', so the base URL must not end with one."""
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept log levels in any case."""
        return v.upper()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
