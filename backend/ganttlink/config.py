"""
Application settings for ganttlink.

Values are read from the environment (prefix GANTTLINK_) or a local .env file.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GANTTLINK_",
        env_file=".env",
        extra="ignore",
    )

    debug: bool = False
    log_level: str | None = None
    engine_log_level: str | None = None  # ganttlink.services only; defaults to log_level
    log_json: bool = False

    # Engine defaults, overridable per request
    pixels_per_time_unit: float = 1.0
    max_depth: int = 10
    epsilon: float = 1e-6


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()
