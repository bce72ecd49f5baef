"""FastAPI dependencies that expose the shared connection handles.

Handles live on ``app.state.dependencies`` (set by ``create_app``), never in
module globals, so tests can inject fakes.
"""

from __future__ import annotations

from typing import Any

from fastapi import Depends, Request

from app.config import Settings, get_settings
from app.core.dependencies import Dependencies


def get_dependencies(request: Request) -> Dependencies:
    dependencies = getattr(request.app.state, "dependencies", None)
    if dependencies is None:
        raise RuntimeError("Dependencies not initialized; call init_dependencies() first")
    return dependencies


def get_engine(dependencies: Dependencies = Depends(get_dependencies)) -> Any:
    return dependencies.engine


def get_cache(dependencies: Dependencies = Depends(get_dependencies)) -> Any:
    return dependencies.redis


def get_probe_timeout(config: Settings = Depends(get_settings)) -> float:
    return config.probe_timeout
