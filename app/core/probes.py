"""Liveness probes for the health endpoint.

Each probe issues one trivial round-trip (``SELECT 1`` / ``PING``) bounded by
a timeout. Probes never raise: errors and timeouts are logged and reported
as ``ComponentStatus.UNHEALTHY``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from sqlalchemy import text

from app.models.health import ComponentStatus, HealthReport

logger = logging.getLogger(__name__)


async def _run_probe(
    name: str,
    probe: Callable[[], Awaitable[Any]],
    timeout: float,
) -> ComponentStatus:
    try:
        await asyncio.wait_for(probe(), timeout=timeout)
    except asyncio.TimeoutError:
        logger.error("%s health check timed out after %.1fs", name, timeout)
        return ComponentStatus.UNHEALTHY
    except Exception as exc:
        logger.error("%s health check failed: %s", name, exc)
        return ComponentStatus.UNHEALTHY
    return ComponentStatus.HEALTHY


async def _select_one(engine: Any) -> None:
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def probe_database(engine: Any, timeout: float) -> ComponentStatus:
    """Run ``SELECT 1`` on a pooled connection."""
    return await _run_probe("PostgreSQL", lambda: _select_one(engine), timeout)


async def probe_cache(redis: Any, timeout: float) -> ComponentStatus:
    """Send ``PING`` over the shared Redis client."""
    return await _run_probe("Redis", redis.ping, timeout)


async def check_health(engine: Any, redis: Any, timeout: float) -> HealthReport:
    """Build a fresh report from the database and cache probes.

    The broker is not probed; ``rabbitmq`` stays ``unknown``.
    """
    report = HealthReport()
    report.record("postgres", await probe_database(engine, timeout))
    report.record("redis", await probe_cache(redis, timeout))
    return report
