"""Connector configuration from environment variables."""

from functools import lru_cache
from typing import Optional

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://scrape.evomi.com"


class Settings(BaseSettings):
    api_key: Optional[SecretStr] = None
    base_url: str = DEFAULT_BASE_URL
    integration: str = "n8n"
    timeout: float = 60.0  # seconds; scrapes may wait up to 30 s upstream
    log_level: str = "INFO"
    rate_limit: str = "10/minute"

    model_config = SettingsConfigDict(env_prefix="EVOMI_", env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
