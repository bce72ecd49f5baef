"""Connections to the external services the API server depends on.

Startup opens, in order:
- a bounded async SQLAlchemy pool (asyncpg) → PostgreSQL
- a pooled, reconnecting redis-py async client → Redis
- a robust aio-pika connection + channel → RabbitMQ, declaring ``task_queue``

Any failure is fatal: the matching ``StartupError`` subclass is raised and
whatever was already opened is closed again. There is no retry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import aio_pika
from redis.asyncio import Redis
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from app.config import Settings
from app.core.exceptions import (
    BrokerConnectionError,
    CacheConnectionError,
    DatabaseConnectionError,
)

logger = logging.getLogger(__name__)


@dataclass
class BrokerHandles:
    """RabbitMQ connection, channel and the queue declared at startup."""

    connection: Any
    channel: Any
    queue: Any

    async def close(self) -> None:
        await self.connection.close()


@dataclass
class Dependencies:
    """Shared handles injected into the FastAPI app.

    ``broker`` is optional so tests (and callers that only need the health
    endpoint) can build the app from a database engine and a cache client.
    """

    engine: AsyncEngine
    redis: Redis
    broker: BrokerHandles | None = None

    async def close(self) -> None:
        """Release every handle, newest first."""
        if self.broker is not None:
            await self.broker.close()
            logger.info("RabbitMQ connection closed")
        await self.redis.aclose()
        logger.info("Redis connection closed")
        await self.engine.dispose()
        logger.info("PostgreSQL pool disposed")


# ---------------------------------------------------------------------------
#  Individual connectors
# ---------------------------------------------------------------------------

async def connect_database(settings: Settings) -> AsyncEngine:
    """Create the async engine and prove it can reach PostgreSQL.

    ``max_overflow=0`` makes ``db_pool_size`` a hard cap; requests beyond it
    wait for a free connection (SQLAlchemy's default ``pool_timeout``).
    """
    logger.info("Connecting to PostgreSQL...")
    try:
        engine = create_async_engine(
            settings.async_database_url,
            pool_size=settings.db_pool_size,
            max_overflow=0,
            echo=False,
        )
    except Exception as exc:
        raise DatabaseConnectionError(f"Failed to create PostgreSQL pool: {exc}") from exc

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:
        await engine.dispose()
        raise DatabaseConnectionError(f"Failed to connect to PostgreSQL: {exc}") from exc

    logger.info("PostgreSQL pool ready (max %d connections)", settings.db_pool_size)
    return engine


async def connect_cache(settings: Settings) -> Redis:
    """Create the Redis client and verify it answers PING."""
    logger.info("Connecting to Redis...")
    try:
        client = Redis.from_url(settings.redis_url)
    except Exception as exc:
        raise CacheConnectionError(f"Failed to create Redis client: {exc}") from exc

    try:
        await client.ping()
    except Exception as exc:
        await client.aclose()
        raise CacheConnectionError(f"Failed to connect to Redis: {exc}") from exc

    logger.info("Redis connection ready")
    return client


async def connect_broker(settings: Settings) -> BrokerHandles:
    """Connect to RabbitMQ, open a channel and declare the work queue."""
    logger.info("Connecting to RabbitMQ...")
    try:
        connection = await aio_pika.connect_robust(settings.amqp_url)
    except Exception as exc:
        raise BrokerConnectionError(f"Failed to connect to RabbitMQ: {exc}") from exc

    try:
        channel = await connection.channel()
    except Exception as exc:
        await connection.close()
        raise BrokerConnectionError(f"Failed to create RabbitMQ channel: {exc}") from exc

    try:
        queue = await channel.declare_queue(settings.queue_name)
    except Exception as exc:
        await connection.close()
        raise BrokerConnectionError(
            f"Failed to declare queue {settings.queue_name!r}: {exc}"
        ) from exc

    logger.info("RabbitMQ ready, queue %r declared", settings.queue_name)
    return BrokerHandles(connection=connection, channel=channel, queue=queue)


# ---------------------------------------------------------------------------
#  Bootstrap sequence
# ---------------------------------------------------------------------------

async def init_dependencies(settings: Settings) -> Dependencies:
    """Open database, cache and broker connections, in that order."""
    engine = await connect_database(settings)

    try:
        redis = await connect_cache(settings)
    except Exception:
        await engine.dispose()
        raise

    try:
        broker = await connect_broker(settings)
    except Exception:
        await redis.aclose()
        await engine.dispose()
        raise

    return Dependencies(engine=engine, redis=redis, broker=broker)
