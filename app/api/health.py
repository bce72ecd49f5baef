"""Health-check endpoint.

Docker Compose health checks and load balancers hit this endpoint
to verify the application can reach PostgreSQL and Redis.

GET /health and GET /api/health are aliases.  Both always answer 200;
failures show up only in the body's ``status`` field.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from app.api.deps import get_cache, get_engine, get_probe_timeout
from app.core.probes import check_health
from app.models.health import HealthReport

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthReport)
@router.get("/api/health", response_model=HealthReport)
async def health_check(
    engine: Any = Depends(get_engine),
    redis: Any = Depends(get_cache),
    timeout: float = Depends(get_probe_timeout),
) -> HealthReport:
    """Probe the database and the cache and report each result.

    The broker is not probed, so ``rabbitmq`` is always ``"unknown"``.
    """
    return await check_health(engine, redis, timeout)
