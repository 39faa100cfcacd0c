"""Main CLI application.

Click commands for threadboard: serve, init-db, check.
"""

from __future__ import annotations

import asyncio
import sys
from typing import TYPE_CHECKING

import click

from threadboard import __version__
from threadboard.config.loader import load_config
from threadboard.core.errors import ConfigError, ThreadboardError
from threadboard.core.log import configure_logging

if TYPE_CHECKING:
    from threadboard.config.schema import ThreadboardConfig
    from threadboard.forum.consistency import CounterDrift


# ── Helpers ──────────────────────────────────────────────────────


def _error(msg: str) -> None:
    """Print an error message to stderr and exit."""
    click.echo(f"Error: {msg}", err=True)
    sys.exit(1)


def _load_config(config_path: str | None) -> ThreadboardConfig:
    """Load config with user-friendly error handling."""
    try:
        config = load_config(path=config_path)
    except ConfigError as e:
        _error(str(e))
        raise  # unreachable, keeps mypy happy
    configure_logging(config.logging)
    return config


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="threadboard")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True),
    default=None,
    help="Path to config file.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str | None) -> None:
    """threadboard - threaded discussion store.

    Posts, nested comments and upvotes with consistent counters.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# ── serve ────────────────────────────────────────────────────────


@cli.command()
@click.option("--host", default=None, help="Host to bind to (overrides config).")
@click.option(
    "--port", type=int, default=None, help="Port to bind to (overrides config)."
)
@click.option(
    "--reload", is_flag=True, default=False, help="Enable auto-reload for development."
)
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None, reload: bool) -> None:
    """Start the REST API server."""
    import uvicorn

    from threadboard.api.app import create_app

    config = _load_config(ctx.obj["config_path"])

    app = create_app(config)
    uvicorn.run(
        app,
        host=host or config.api.host,
        port=port or config.api.port,
        reload=reload,
    )


# ── init-db ──────────────────────────────────────────────────────


@cli.command("init-db")
@click.pass_context
def init_db(ctx: click.Context) -> None:
    """Create any missing tables (use alembic for managed databases)."""
    config = _load_config(ctx.obj["config_path"])
    try:
        asyncio.run(_init_db_async(config))
    except ThreadboardError as e:
        _error(str(e))
    click.echo("Database initialised.")


async def _init_db_async(config: ThreadboardConfig) -> None:
    from threadboard.store.database import create_db, create_tables

    _, engine = await create_db(config)
    try:
        await create_tables(engine)
    finally:
        await engine.dispose()


# ── check ────────────────────────────────────────────────────────


@cli.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """Verify stored counters against the raw vote and comment rows."""
    config = _load_config(ctx.obj["config_path"])
    try:
        drifts = asyncio.run(_check_async(config))
    except ThreadboardError as e:
        _error(str(e))
        return

    if not drifts:
        click.echo("All counters consistent.")
        return

    for drift in drifts:
        click.echo(str(drift))
    _error(f"{len(drifts)} inconsistent value(s) found")


async def _check_async(config: ThreadboardConfig) -> list[CounterDrift]:
    from threadboard.forum.consistency import check_consistency
    from threadboard.store.database import create_db

    factory, engine = await create_db(config)
    try:
        async with factory() as session:
            return await check_consistency(session)
    finally:
        await engine.dispose()
