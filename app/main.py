"""FastAPI application entry point.

Start with:
    api-server                      # bootstrap, then serve on APP_HOST:APP_PORT
    uvicorn app.main:app --reload   # development; connects in the lifespan

The startup sequence is strictly:
    settings → PostgreSQL → Redis → RabbitMQ → bind HTTP socket
Any failure before the bind is fatal and exits with status 1.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from pydantic import ValidationError

from app.api.health import router as health_router
from app.api.root import router as root_router
from app.config import Settings, get_settings
from app.core.dependencies import Dependencies, init_dependencies
from app.core.exceptions import ConfigurationError, StartupError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ---------------------------------------------------------------------------
#  Lifespan: startup / shutdown
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Connect dependencies unless they were injected by the caller.

    Injected dependencies are owned by whoever built them and are not closed
    here.
    """
    if app.state.dependencies is not None:
        yield
        return

    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("API server starting up")
    app.state.dependencies = await init_dependencies(settings)

    yield

    logger.info("API server shutting down")
    await app.state.dependencies.close()
    app.state.dependencies = None


# ---------------------------------------------------------------------------
#  FastAPI application
# ---------------------------------------------------------------------------

def create_app(dependencies: Dependencies | None = None) -> FastAPI:
    """Build the application, optionally around already-open dependencies."""
    application = FastAPI(
        title="API Server",
        description="Bootstrap service for PostgreSQL, Redis and RabbitMQ",
        version="1.0.0",
        lifespan=lifespan,
    )
    application.state.dependencies = dependencies

    application.include_router(root_router)
    application.include_router(health_router)
    return application


app = create_app()


# ---------------------------------------------------------------------------
#  Process entry point
# ---------------------------------------------------------------------------

async def serve(settings: Settings) -> None:
    """Open every dependency, then run uvicorn in the same event loop."""
    dependencies = await init_dependencies(settings)
    try:
        config = uvicorn.Config(
            create_app(dependencies),
            host=settings.app_host,
            port=settings.app_port,
            log_config=None,
        )
        server = uvicorn.Server(config)
        logger.info("Starting HTTP server on %s:%d", settings.app_host, settings.app_port)
        await server.serve()
    finally:
        await dependencies.close()


def load_settings() -> Settings:
    """Read settings, turning validation errors into a startup failure."""
    try:
        return get_settings()
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid environment configuration: {exc}") from exc


def main() -> None:
    """Console-script entry point."""
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        configure_logging("INFO")
        logger.critical("Startup failed (%s): %s", exc.step, exc)
        sys.exit(1)

    configure_logging(settings.log_level)
    logger.info("Starting API server...")

    try:
        asyncio.run(serve(settings))
    except StartupError as exc:
        logger.critical("Startup failed (%s): %s", exc.step, exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
