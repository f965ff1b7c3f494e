"""Application-wide settings for the alias proxy."""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ADDY_BASE_URL = "https://app.addy.io/api/v1"


class Settings(BaseSettings):
    """Global application configuration.

    Credentials (admin password, addy API key, signing secret) are not read
    from here; they live in the settings store and are written by the setup
    flow.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Origin guard / CORS
    allowed_origin: str = "http://localhost:5173"
    enforce_origin: bool = True
    client_ip_header: str = "CF-Connecting-IP"

    # Upstream alias provider
    addy_base_url: str = DEFAULT_ADDY_BASE_URL
    addy_request_timeout: float = 30.0

    # Settings persistence (JSON file fallback when no database is configured)
    settings_store_path: str = "storage/settings.json"
    database_url: Optional[str] = None
    database_echo: bool = False

    # Session tokens and login throttling
    token_ttl_seconds: int = 3600
    auth_rate_window_seconds: int = 15 * 60
    auth_rate_max_attempts: int = 5

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()


__all__ = ["Settings", "get_settings", "DEFAULT_ADDY_BASE_URL"]
