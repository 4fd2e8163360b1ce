"""Application configuration via pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ASYNC_SCHEME = "postgresql+asyncpg://"

# Schemes accepted in the environment, rewritten to the asyncpg driver scheme.
_PLAIN_SCHEMES = ("postgresql://", "postgres://")


def normalize_database_url(url: str) -> str:
    for scheme in _PLAIN_SCHEMES:
        if url.startswith(scheme):
            return ASYNC_SCHEME + url[len(scheme) :]
    return url


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "ManualChat"
    app_env: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    enable_dev_logging: bool = True

    # Database
    frontend_database_url: str | None = None
    frontend_postgres_url: str | None = None
    db_pool_size: int = 10
    db_connect_timeout: int = 30
    db_pool_recycle: int = 30

    @property
    def database_url(self) -> str | None:
        url = self.frontend_database_url or self.frontend_postgres_url
        if not url:
            return None
        return normalize_database_url(url)

    @property
    def database_url_sync(self) -> str | None:
        url = self.database_url
        if url is None:
            return None
        return url.replace(ASYNC_SCHEME, "postgresql://", 1)

    # Inference backend
    backend_url: str = "http://localhost:8001"
    api_timeout: int = Field(30000, description="Backend request timeout in milliseconds")
    health_timeout: float = 5.0

    # Usage limits
    guest_max_messages_per_day: int = 20
    regular_max_messages_per_day: int = 100
    rate_limit_window_hours: int = 24

    # Guests
    guest_email_domain: str = "guest.user"


@lru_cache
def get_settings() -> Settings:
    return Settings()
