"""Alembic environment for the threadboard schema.

The database URL comes from ``sqlalchemy.url`` when it is set (in
``alembic.ini`` or by a caller), otherwise from the threadboard config
file chain, so ``alembic upgrade head`` targets the same database as
``threadboard serve``.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool
from sqlalchemy.ext.asyncio import async_engine_from_config

from threadboard.config import load_config
from threadboard.store.database import _expand_url
from threadboard.store.models import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata

_ASYNC_DRIVERS = ("+aiosqlite", "+asyncpg")


def _database_url() -> str:
    url = config.get_main_option("sqlalchemy.url") or load_config().database.url
    return _expand_url(url)


def _engine_section() -> dict[str, str]:
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = _database_url()
    return section


def run_migrations_offline() -> None:
    """Emit SQL for the migrations without a live connection."""
    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:  # type: ignore[no-untyped-def]
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=True,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations(section: dict[str, str]) -> None:
    connectable = async_engine_from_config(
        section, prefix="sqlalchemy.", poolclass=pool.NullPool
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    """Apply migrations over a sync or async driver, whichever the URL names."""
    section = _engine_section()

    if any(d in section["sqlalchemy.url"] for d in _ASYNC_DRIVERS):
        asyncio.run(run_async_migrations(section))
        return

    connectable = engine_from_config(
        section, prefix="sqlalchemy.", poolclass=pool.NullPool
    )
    with connectable.connect() as connection:
        do_run_migrations(connection)
    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
