"""Engine, session factory and transaction boundary helpers.

Services in ``threadboard.forum`` receive an ``AsyncSession`` per unit of
work. Write operations wrap their statements in :func:`transaction`, which
commits on success and rolls back on any failure so a partially applied
counter update is never persisted.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import event
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from threadboard.core.errors import ConflictError, NotFoundError, StorageError
from threadboard.store.models import Base

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

    from threadboard.config.schema import ThreadboardConfig

logger = logging.getLogger(__name__)


def _expand_url(url: str) -> str:
    """Expand ``~`` and create the parent directory for file-based SQLite."""
    if "~" in url:
        url = url.replace("~", str(Path.home()))
    if url.startswith("sqlite"):
        db_path = url.split("///")[-1] if "///" in url else ""
        if db_path and db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    return url


def _is_memory_sqlite(url: str) -> bool:
    return url.startswith("sqlite") and (":memory:" in url or "///" not in url)


async def create_db(
    config: ThreadboardConfig,
) -> tuple[async_sessionmaker[AsyncSession], AsyncEngine]:
    """Create async engine and sessionmaker from config."""
    url = _expand_url(config.database.url)

    engine_kwargs: dict[str, object] = {}
    if url.startswith("sqlite"):
        if _is_memory_sqlite(url):
            # In-memory SQLite needs StaticPool so all sessions share
            # the same connection (and thus the same database).
            from sqlalchemy.pool import StaticPool

            engine_kwargs["poolclass"] = StaticPool
            engine_kwargs["connect_args"] = {"check_same_thread": False}
        else:
            from sqlalchemy.pool import NullPool

            engine_kwargs["poolclass"] = NullPool
    else:
        engine_kwargs["pool_size"] = config.database.pool_size
        engine_kwargs["max_overflow"] = config.database.max_overflow
        engine_kwargs["pool_timeout"] = config.database.pool_timeout
        engine_kwargs["pool_recycle"] = config.database.pool_recycle
        engine_kwargs["pool_pre_ping"] = True

    engine = create_async_engine(url, **engine_kwargs)

    if url.startswith("sqlite"):

        @event.listens_for(engine.sync_engine, "connect")
        def _enable_fks(dbapi_conn, connection_record):  # type: ignore[no-untyped-def]
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    # File-based SQLite and PostgreSQL are managed by alembic migrations.
    if _is_memory_sqlite(url):
        await create_tables(engine)

    logger.info("Database ready: %s", engine.url.render_as_string(hide_password=True))
    factory = async_sessionmaker(engine, expire_on_commit=False)
    return factory, engine


async def create_tables(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# Structured constraint codes: PostgreSQL SQLSTATE and SQLite extended
# result names (``sqlite3.Error.sqlite_errorname``).
_UNIQUE_CODES = frozenset(
    {"23505", "SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY"}
)
_FOREIGN_KEY_CODES = frozenset({"23503", "SQLITE_CONSTRAINT_FOREIGNKEY"})


def constraint_kind(error: IntegrityError) -> str | None:
    """Classify an integrity failure as ``"unique"``, ``"foreign_key"`` or None.

    Prefers the driver's structured error code and falls back to SQLite's
    message text for builds that do not expose extended result names.
    """
    orig = error.orig
    code = (
        getattr(orig, "sqlstate", None)
        or getattr(orig, "pgcode", None)
        or getattr(orig, "sqlite_errorname", None)
    )
    if code in _UNIQUE_CODES:
        return "unique"
    if code in _FOREIGN_KEY_CODES:
        return "foreign_key"

    text = str(orig)
    if "UNIQUE constraint failed" in text:
        return "unique"
    if "FOREIGN KEY constraint failed" in text:
        return "foreign_key"
    return None


@asynccontextmanager
async def transaction(
    session: AsyncSession,
    *,
    conflict: str = "Duplicate entry",
    missing: tuple[str, str] | None = None,
) -> AsyncIterator[AsyncSession]:
    """Run a block of statements as one atomic unit.

    Commits when the block exits cleanly. On any exception the session is
    rolled back before the error is translated:

    - a uniqueness violation becomes :class:`ConflictError` with the
      ``conflict`` message;
    - a foreign key violation becomes ``NotFoundError(*missing)`` when the
      caller names the row it expects to exist, :class:`StorageError`
      otherwise;
    - any other SQLAlchemy failure (NOT NULL, check, connection) becomes
      :class:`StorageError`.

    Domain errors propagate unchanged.
    """
    try:
        yield session
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        kind = constraint_kind(e)
        if kind == "unique":
            raise ConflictError(conflict) from e
        if kind == "foreign_key" and missing is not None:
            raise NotFoundError(*missing) from e
        msg = f"Integrity constraint violated: {e.orig}"
        raise StorageError(msg) from e
    except SQLAlchemyError as e:
        await session.rollback()
        msg = f"Database error: {e}"
        raise StorageError(msg) from e
    except Exception:
        await session.rollback()
        raise
