"""
Liveness and database health endpoints.
"""

import time

from fastapi import APIRouter

from salon_inventory.application.dto.responses import DatabaseHealthResponse, HealthResponse
from salon_inventory.config import get_settings

router = APIRouter(prefix="/api/health", tags=["health"])

_started_at = time.monotonic()


def _report(database: DatabaseHealthResponse | None = None) -> HealthResponse:
    healthy = database is None or database.available
    return HealthResponse(
        status="healthy" if healthy else "unhealthy",
        version=get_settings().app_version,
        uptime_seconds=time.monotonic() - _started_at,
        database=database,
    )


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Service is up; reports version and uptime."""
    return _report()


@router.get("/db", response_model=HealthResponse)
async def db_health() -> HealthResponse:
    """Round-trip ``SELECT 1`` through the connection pool and time it."""
    from salon_inventory.infrastructure.storage.sqlite import get_pool

    started = time.perf_counter()
    try:
        pool = await get_pool()
        async with pool.acquire() as conn:
            await conn.execute("SELECT 1")
    except Exception as exc:
        return _report(DatabaseHealthResponse(name="sqlite", available=False, error=str(exc)))

    latency_ms = (time.perf_counter() - started) * 1000
    return _report(DatabaseHealthResponse(name="sqlite", available=True, latency_ms=latency_ms))
