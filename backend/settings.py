"""
Centralized settings configuration using Pydantic BaseSettings.

All environment variables are defined here with types, defaults, and validation.
Use get_settings() for dependency injection compatibility in FastAPI.

Usage:
    from backend.settings import get_settings, Settings

    # In FastAPI endpoints (dependency injection)
    @app.get("/")
    def read_root(settings: Settings = Depends(get_settings)):
        return {"environment": settings.environment}

    # Direct access (module-level)
    settings = get_settings()
    print(settings.default_rest_seconds)
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Core Environment
    # -------------------------------------------------------------------------
    environment: str = Field(
        default="development",
        description="Runtime environment: development, staging, production",
    )

    # -------------------------------------------------------------------------
    # Supabase Database (record store)
    # -------------------------------------------------------------------------
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL",
    )
    supabase_service_role_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key (full access)",
    )
    supabase_anon_key: Optional[str] = Field(
        default=None,
        description="Supabase anonymous key (limited access)",
    )

    @property
    def supabase_key(self) -> Optional[str]:
        """Get the best available Supabase key (service role preferred)."""
        return self.supabase_service_role_key or self.supabase_anon_key

    # -------------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------------
    jwt_secret: str = Field(
        default="coachflow-jwt-secret-change-in-production",
        description="Secret key for HS256 access tokens",
    )
    api_keys: str = Field(
        default="",
        description="Comma-separated list of valid API keys",
    )

    @property
    def api_keys_list(self) -> list[str]:
        """Parse API keys into a list."""
        return [k.strip() for k in self.api_keys.split(",") if k.strip()]

    # -------------------------------------------------------------------------
    # Workout Session
    # -------------------------------------------------------------------------
    default_rest_seconds: int = Field(
        default=90,
        ge=0,
        description="Rest countdown when neither the set nor the exercise sets one",
    )
    rest_extension_seconds: int = Field(
        default=30,
        ge=1,
        description="Seconds added by a single rest extension",
    )

    # -------------------------------------------------------------------------
    # Progression
    # -------------------------------------------------------------------------
    progression_history_window: int = Field(
        default=20,
        ge=1,
        description="Most recent set records considered for a suggestion",
    )
    progression_increment: float = Field(
        default=2.5,
        gt=0,
        description="Load added when the last top set felt easy",
    )
    progression_increase_max_rpe: float = Field(
        default=7.0,
        ge=1,
        le=10,
        description="Top-set RPE at or below which load is increased",
    )
    progression_consolidate_min_rpe: float = Field(
        default=9.0,
        ge=1,
        le=10,
        description="Top-set RPE above which load is held to consolidate",
    )

    # -------------------------------------------------------------------------
    # Device (CLI) - local storage and sync
    # -------------------------------------------------------------------------
    device_store_dir: Path = Field(
        default=Path.home() / ".coachflow",
        description="Directory for device-local session state and the offline queue",
    )
    api_base_url: str = Field(
        default="http://localhost:8001",
        description="Training API the device syncs finalized sessions to",
    )
    device_api_key: Optional[str] = Field(
        default=None,
        description="API key the device presents when syncing (key:user_id)",
    )
    sync_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="HTTP timeout for a single sync request",
    )
    sync_max_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempts per sync request before the log stays queued",
    )

    # -------------------------------------------------------------------------
    # Observability - Sentry
    # -------------------------------------------------------------------------
    sentry_dsn: Optional[str] = Field(
        default=None,
        description="Sentry DSN for error tracking",
    )

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is a valid value."""
        valid_environments = {"development", "staging", "production", "test"}
        if v.lower() not in valid_environments:
            raise ValueError(
                f"Invalid environment '{v}'. Must be one of: {valid_environments}"
            )
        return v.lower()

    # -------------------------------------------------------------------------
    # Helper Properties
    # -------------------------------------------------------------------------
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.environment == "test"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    For testing, you can clear the cache with get_settings.cache_clear().

    Returns:
        Settings: Application settings instance
    """
    return Settings()
