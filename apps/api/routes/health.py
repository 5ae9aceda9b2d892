"""Health check routes."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger("garagehub.api")

router = APIRouter(tags=["health"])

_PROBE_TIMEOUT_S = 3.0


class DependencyHealth(BaseModel):
    status: str  # "ok" | "error" | "unknown"
    error: str | None = None


class ReadinessResponse(BaseModel):
    status: str  # "ready" | "degraded"
    postgres: DependencyHealth
    redis: DependencyHealth


async def _probe_postgres(request: Request) -> DependencyHealth:
    pool = getattr(request.app.state, "db_pool", None)
    if pool is None:
        return DependencyHealth(status="unknown", error="db pool not initialized")
    try:
        async with pool.connection() as conn:
            await asyncio.wait_for(conn.execute("SELECT 1"), timeout=_PROBE_TIMEOUT_S)
    except Exception as exc:
        logger.warning("postgres readiness probe failed: %s", exc)
        return DependencyHealth(status="error", error=str(exc) or type(exc).__name__)
    return DependencyHealth(status="ok")


async def _probe_redis(request: Request) -> DependencyHealth:
    redis = getattr(request.app.state, "redis", None)
    if redis is None:
        return DependencyHealth(status="unknown", error="redis not initialized")
    try:
        await asyncio.wait_for(redis.ping(), timeout=_PROBE_TIMEOUT_S)
    except Exception as exc:
        logger.warning("redis readiness probe failed: %s", exc)
        return DependencyHealth(status="error", error=str(exc) or type(exc).__name__)
    return DependencyHealth(status="ok")


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness check."""
    return {"status": "ok"}


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness(request: Request):
    postgres, redis = await asyncio.gather(_probe_postgres(request), _probe_redis(request))
    ready = postgres.status == "ok" and redis.status == "ok"
    body = ReadinessResponse(status="ready" if ready else "degraded", postgres=postgres, redis=redis)
    return JSONResponse(status_code=200 if ready else 503, content=body.model_dump())
