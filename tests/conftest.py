"""Shared fixtures: fake database engine / Redis client and a TestClient."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_probe_timeout
from app.core.dependencies import Dependencies
from app.main import create_app

SERVICE_ENV_VARS = (
    "DATABASE_URL",
    "REDIS_URL",
    "AMQP_URL",
    "APP_HOST",
    "APP_PORT",
    "DB_POOL_SIZE",
    "QUEUE_NAME",
    "LOG_LEVEL",
    "PROBE_TIMEOUT",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the host environment from overriding documented defaults."""
    for name in SERVICE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class _FakeConnection:
    """Async context manager standing in for ``AsyncEngine.connect()``."""

    def __init__(self, engine: FakeEngine) -> None:
        self._engine = engine

    async def __aenter__(self) -> _FakeConnection:
        if self._engine.delay:
            await asyncio.sleep(self._engine.delay)
        if self._engine.error is not None:
            raise self._engine.error
        return self

    async def __aexit__(self, *exc_info: Any) -> bool:
        return False

    async def execute(self, statement: Any) -> None:
        self._engine.statements.append(str(statement))


class FakeEngine:
    """Minimal async engine: ``connect()`` fails with ``error`` if set."""

    def __init__(self, error: Exception | None = None, delay: float = 0.0) -> None:
        self.error = error
        self.delay = delay
        self.statements: list[str] = []
        self.disposed = False

    def connect(self) -> _FakeConnection:
        return _FakeConnection(self)

    async def dispose(self) -> None:
        self.disposed = True


class FakeRedis:
    """Minimal redis.asyncio client: ``ping()`` fails with ``error`` if set."""

    def __init__(self, error: Exception | None = None, delay: float = 0.0) -> None:
        self.error = error
        self.delay = delay
        self.pings = 0
        self.closed = False

    async def ping(self) -> bool:
        self.pings += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return True

    async def aclose(self) -> None:
        self.closed = True


def _build_client(
    engine: FakeEngine | None = None,
    redis: FakeRedis | None = None,
    probe_timeout: float = 1.0,
) -> TestClient:
    """Build a TestClient around injected fake dependencies."""
    dependencies = Dependencies(engine=engine or FakeEngine(), redis=redis or FakeRedis())
    app = create_app(dependencies)
    app.dependency_overrides[get_probe_timeout] = lambda: probe_timeout
    return TestClient(app)


@pytest.fixture()
def make_client() -> Callable[..., TestClient]:
    """Factory fixture: build a client from custom fakes."""
    return _build_client


@pytest.fixture()
def client() -> TestClient:
    """A client whose database and cache are both reachable."""
    return _build_client()
