"""Process-wide logging setup driven by ``LoggingConfig``."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from threadboard.config.schema import LoggingConfig

_PLAIN_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_STRUCTURED_FORMAT = (
    "ts=%(asctime)s level=%(levelname)s logger=%(name)s msg=%(message)r"
)


def configure_logging(config: LoggingConfig) -> None:
    """Install handlers on the root logger.

    Logs go to stderr, and additionally to ``config.file`` when set.
    Calling again replaces the handlers installed by a previous call.
    """
    fmt = _STRUCTURED_FORMAT if config.structured else _PLAIN_FORMAT
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if config.file:
        handlers.append(logging.FileHandler(config.file))

    logging.basicConfig(
        level=config.level.upper(),
        format=fmt,
        handlers=handlers,
        force=True,
    )
