"""Shared fixtures: an in-memory SQLite database and settings isolation."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

BASE_TIME = datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)


def at(minutes: int) -> datetime:
    """A fixed timestamp ``minutes`` after BASE_TIME."""
    return BASE_TIME + timedelta(minutes=minutes)


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch):
    """Fresh settings per test, unaffected by ambient database variables."""
    from manualchat import config
    from manualchat.db import session as db_session

    for var in ("FRONTEND_DATABASE_URL", "FRONTEND_POSTGRES_URL", "APP_ENV"):
        monkeypatch.delenv(var, raising=False)
    config.get_settings.cache_clear()
    db_session._database = None
    db_session._diagnostics_logged.clear()
    yield
    config.get_settings.cache_clear()
    db_session._database = None
    db_session._diagnostics_logged.clear()


@pytest_asyncio.fixture
async def engine():
    from manualchat.db.session import Base
    import manualchat.models  # noqa: F401

    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session
