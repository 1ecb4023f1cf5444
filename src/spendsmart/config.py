"""
SpendSmart - Configuration and settings.

Settings are read from the environment (or .env). Supabase fields are optional
so the onboarding engine can run offline against local fakes.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Supabase
    supabase_url: str = ""
    supabase_service_role_key: str = ""

    # Application
    spendsmart_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Dev user for CLI commands
    dev_user_id: str = "00000000-0000-0000-0000-000000000001"

    # Onboarding
    onboarding_table: str = "user_onboarding"
    personalization_ticks: int = 20
    personalization_tick_seconds: float = 0.25
    persistence_timeout_seconds: float = 5.0  # Per remote call

    # Local storage (backup copy, currency, completion flag)
    default_currency: str = "USD"
    local_store_dir: Path = Path("~/.spendsmart")

    @property
    def is_development(self) -> bool:
        return self.spendsmart_env == "development"

    @property
    def is_production(self) -> bool:
        return self.spendsmart_env == "production"

    def local_store_path(self, user_id: str) -> Path:
        """One local store file per user."""
        return self.local_store_dir.expanduser() / f"{user_id}.json"

    @property
    def supabase_configured(self) -> bool:
        return self.supabase_url.startswith("https://") and bool(self.supabase_service_role_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


class _SettingsProxy:
    """Lazy proxy for settings to avoid loading .env at import time."""

    _instance: Settings | None = None

    def __getattr__(self, name: str):
        if self._instance is None:
            self._instance = get_settings()
        return getattr(self._instance, name)


settings = _SettingsProxy()
