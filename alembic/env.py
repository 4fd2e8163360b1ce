"""Alembic env.py with async SQLAlchemy support."""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.ext.asyncio import async_engine_from_config

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Import all models so Alembic can detect them
from manualchat.db.session import Base  # noqa: E402
from manualchat.models import *  # noqa: E402, F401, F403

target_metadata = Base.metadata


def _require_url(url: str | None) -> str:
    if url is None:
        raise RuntimeError("Set FRONTEND_DATABASE_URL or FRONTEND_POSTGRES_URL to run migrations")
    return url


def run_migrations_offline() -> None:
    from manualchat.config import get_settings

    url = _require_url(get_settings().database_url_sync)
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection):
    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    from manualchat.config import get_settings

    connectable = async_engine_from_config(
        {"sqlalchemy.url": _require_url(get_settings().database_url)},
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
