"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Recommendation engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_env: Literal["development", "production", "test"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] | None = None

    # External APIs
    tmdb_api_key: str = ""
    tmdb_language: str = "en-US"

    # Recommendations
    recommendation_cache_ttl_seconds: int = 300
    catalog_fetch_timeout_seconds: float = 8.0
    genre_fetch_timeout_ms: int = 10000
    genre_fetch_concurrency: int = 8

    @field_validator("recommendation_cache_ttl_seconds", "genre_fetch_timeout_ms", "genre_fetch_concurrency")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Reject zero or negative durations and pool sizes."""
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("catalog_fetch_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("catalog_fetch_timeout_seconds must be positive")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
