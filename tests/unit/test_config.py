"""Tests for manualchat.config."""

import os
from unittest.mock import patch


def make_settings(**kwargs):
    """Helper to create Settings without reading a local .env file."""
    from manualchat.config import Settings

    return Settings(_env_file=None, **kwargs)  # type: ignore[call-arg]


def test_settings_defaults():
    s = make_settings()
    assert s.app_name == "ManualChat"
    assert s.app_env == "development"
    assert s.enable_dev_logging is True
    assert s.db_pool_size == 10
    assert s.backend_url == "http://localhost:8001"
    assert s.api_timeout == 30000
    assert s.rate_limit_window_hours == 24


def test_database_url_missing():
    s = make_settings()
    assert s.database_url is None
    assert s.database_url_sync is None


def test_database_url_normalizes_postgresql_scheme():
    s = make_settings(frontend_database_url="postgresql://u:p@h:5432/db")
    assert s.database_url == "postgresql+asyncpg://u:p@h:5432/db"


def test_database_url_normalizes_postgres_scheme():
    s = make_settings(frontend_database_url="postgres://u:p@h:5432/db")
    assert s.database_url == "postgresql+asyncpg://u:p@h:5432/db"


def test_database_url_keeps_explicit_driver():
    s = make_settings(frontend_database_url="sqlite+aiosqlite:///chat.db")
    assert s.database_url == "sqlite+aiosqlite:///chat.db"


def test_database_url_prefers_database_over_postgres_var():
    s = make_settings(
        frontend_database_url="postgres://a:a@primary/db",
        frontend_postgres_url="postgres://b:b@secondary/db",
    )
    assert "primary" in s.database_url


def test_database_url_falls_back_to_postgres_var():
    s = make_settings(frontend_postgres_url="postgres://b:b@secondary/db")
    assert s.database_url == "postgresql+asyncpg://b:b@secondary/db"


def test_database_url_sync():
    s = make_settings(frontend_database_url="postgres://u:p@h/db")
    assert s.database_url_sync == "postgresql://u:p@h/db"


def test_settings_read_from_environment():
    env = {"FRONTEND_DATABASE_URL": "postgresql://env:pw@envhost/db", "APP_ENV": "production"}
    with patch.dict(os.environ, env):
        s = make_settings()
    assert s.database_url == "postgresql+asyncpg://env:pw@envhost/db"
    assert s.app_env == "production"


def test_get_settings_caches():
    from manualchat.config import get_settings

    assert get_settings() is get_settings()
