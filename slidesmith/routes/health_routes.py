"""
Health and readiness endpoints.

Reports database connectivity and whether the edge functions endpoint is
configured, so operators can tell a broken deployment from a failing run.
"""

from __future__ import annotations

from time import perf_counter
from typing import Any

from fastapi import APIRouter
from sqlalchemy import text

from slidesmith.configs.config import config
from slidesmith.configs.db import get_session

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
async def health() -> dict[str, Any]:
    """Return basic health info for DB connectivity and remote configuration."""
    db_ok = False
    db_latency_ms: float | None = None
    db_error: str | None = None
    try:
        t0 = perf_counter()
        async with get_session() as s:
            await s.execute(text("SELECT 1"))
        t1 = perf_counter()
        db_ok = True
        db_latency_ms = (t1 - t0) * 1000.0
    except Exception as e:  # noqa: BLE001 - broad for health
        db_error = str(e)

    remote_ok = bool(config.edge_functions_url and config.edge_functions_key)

    info: dict[str, Any] = {
        "status": "ok" if (db_ok and remote_ok) else "degraded",
        "db": {"ok": db_ok},
        "edge_functions": {"ok": remote_ok, "url": config.edge_functions_url},
    }
    if db_latency_ms is not None:
        info["db"]["latency_ms"] = round(db_latency_ms, 2)
    if db_error:
        info["db"]["error"] = db_error

    return info
