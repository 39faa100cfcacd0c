"""Health check endpoints."""

from __future__ import annotations

import time
from typing import Any

from fastapi import APIRouter, Request
from sqlalchemy import text

router = APIRouter(tags=["health"])

_START_TIME = time.monotonic()


@router.get("/api/health")
async def health() -> dict[str, str]:
    """Basic health check -- always returns quickly."""
    return {"status": "ok"}


@router.get("/api/health/detailed")
async def health_detailed(request: Request) -> dict[str, Any]:
    """Health check including a database round trip."""
    from threadboard import __version__

    checks: dict[str, Any] = {
        "status": "ok",
        "version": __version__,
        "uptime_seconds": round(time.monotonic() - _START_TIME, 1),
        "components": {},
    }

    try:
        async with request.app.state.db_factory() as session:
            await session.execute(text("SELECT 1"))
        checks["components"]["database"] = {"status": "ok"}
    except Exception as e:
        checks["components"]["database"] = {"status": "error", "detail": str(e)}
        checks["status"] = "degraded"

    return checks
