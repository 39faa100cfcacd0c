"""Build a ThreadboardConfig from TOML layers and the environment.

Layers, lowest priority first:

    defaults           the Pydantic model defaults
    user file          $XDG_CONFIG_HOME/threadboard/config.toml (or ~/.config)
    project file       ./threadboard.toml
    $THREADBOARD_CONFIG
    explicit path      the ``path`` argument (``--config`` on the CLI)
    environment        $THREADBOARD_DATABASE_URL
    overrides          the ``overrides`` argument

The user and project files are optional; a file named through the
environment or the ``path`` argument must exist. Tables merge key by key,
so a layer only needs to carry the settings it changes.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from threadboard.core.errors import ConfigError

from .schema import ThreadboardConfig

logger = logging.getLogger(__name__)

CONFIG_ENV = "THREADBOARD_CONFIG"
DATABASE_URL_ENV = "THREADBOARD_DATABASE_URL"


def _optional_files() -> list[Path]:
    config_home = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    candidates = [
        Path(config_home) / "threadboard" / "config.toml",
        Path.cwd() / "threadboard.toml",
    ]
    return [p for p in candidates if p.is_file()]


def _required_file(value: str | Path, source: str) -> Path:
    path = Path(value)
    if not path.is_file():
        msg = f"Config file from {source} not found: {value}"
        raise ConfigError(msg)
    return path


def _config_files(explicit: str | Path | None) -> list[Path]:
    files = _optional_files()
    if env_path := os.environ.get(CONFIG_ENV):
        files.append(_required_file(env_path, f"${CONFIG_ENV}"))
    if explicit is not None:
        files.append(_required_file(explicit, "--config"))
    return files


def _parse(path: Path) -> dict[str, Any]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {path}: {e}"
        raise ConfigError(msg) from e
    except OSError as e:
        msg = f"Cannot read config file {path}: {e}"
        raise ConfigError(msg) from e


def _merge(lower: dict[str, Any], upper: dict[str, Any]) -> dict[str, Any]:
    """Apply ``upper`` on top of ``lower`` without mutating either."""
    result = dict(lower)
    for key, value in upper.items():
        below = result.get(key)
        if isinstance(below, dict) and isinstance(value, dict):
            value = _merge(below, value)
        result[key] = value
    return result


def _environment_layer() -> dict[str, Any]:
    if url := os.environ.get(DATABASE_URL_ENV):
        return {"database": {"url": url}}
    return {}


def _describe(error: ValidationError) -> str:
    problems = [
        f"{'.'.join(str(part) for part in item['loc'])}: {item['msg']}"
        for item in error.errors()
    ]
    return "; ".join(problems)


def load_config(
    path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> ThreadboardConfig:
    """Load, merge and validate configuration.

    Raises ConfigError for a missing named file, unreadable or invalid
    TOML, or values the schema rejects.
    """
    data: dict[str, Any] = {}
    for config_file in _config_files(path):
        logger.debug("Reading config layer %s", config_file)
        data = _merge(data, _parse(config_file))
    data = _merge(data, _environment_layer())
    if overrides:
        data = _merge(data, overrides)

    try:
        config = ThreadboardConfig.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid configuration: {_describe(e)}"
        raise ConfigError(msg) from e

    if not config.auth.jwt_secret and config.auth.jwt_secret_env:
        config.auth.jwt_secret = os.environ.get(config.auth.jwt_secret_env, "")
    return config
