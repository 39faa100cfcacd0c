"""Shared test fixtures for threadboard."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from threadboard.config.schema import (
    AuthConfig,
    DatabaseConfig,
    ThreadboardConfig,
)
from threadboard.store.models import Base

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


@pytest.fixture
async def db_session() -> AsyncSession:  # type: ignore[misc]
    """In-memory SQLite async session with FK enforcement."""
    engine = create_async_engine("sqlite+aiosqlite://")

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_fks(dbapi_conn, connection_record):  # type: ignore[no-untyped-def]
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def test_config() -> ThreadboardConfig:
    """Config pointing at a fresh in-memory database with a fixed JWT secret."""
    return ThreadboardConfig(
        database=DatabaseConfig(url="sqlite+aiosqlite://"),
        auth=AuthConfig(jwt_secret="test-secret-key", jwt_secret_env=None),
    )
