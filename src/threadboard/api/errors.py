"""Map core error kinds onto HTTP responses."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi.responses import JSONResponse

from threadboard.core.errors import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    ThreadboardError,
)

if TYPE_CHECKING:
    from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: dict[type[ThreadboardError], int] = {
    NotFoundError: 404,
    InvalidInputError: 400,
    ConflictError: 409,
}


def status_for(error: ThreadboardError) -> int:
    for error_type, status in _STATUS_BY_ERROR.items():
        if isinstance(error, error_type):
            return status
    return 500


async def handle_threadboard_error(
    request: Request, exc: ThreadboardError
) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status,
        content={"success": False, "error": exc.message, "kind": exc.kind},
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(
        ThreadboardError,
        handle_threadboard_error,  # type: ignore[arg-type]
    )
