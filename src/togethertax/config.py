# Settings — environment-driven configuration for the API client and site.
# Created: 2026-10-19

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Remote content API paths, relative to Settings.api_base_url.
API_ENDPOINTS: dict[str, str] = {
    "auth_refresh": "/auth/refresh",
    "business_areas": "/business-areas",
    "members": "/members",
    "insights": "/insights",
    "training_seminars": "/training-seminars",
}


class Settings(BaseSettings):
    """Runtime settings, read from ``TOGETHERTAX_*`` env vars or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="TOGETHERTAX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_base_url: str = "http://localhost:8080/api"
    api_timeout: float = 10.0
    site_url: str = "https://togethertax.co.kr"
    login_path: str = "/login"
    config_dir: Path = Path.home() / ".togethertax"
    log_level: str = "INFO"

    @classmethod
    def load(cls) -> Settings:
        """Build a fresh settings instance (bypasses the cache)."""
        return cls()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.load()


def get_config_dir() -> Path:
    """Get/create the local config directory."""
    d = get_settings().config_dir
    d.mkdir(parents=True, exist_ok=True)
    return d
