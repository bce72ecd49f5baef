"""Health report returned by ``/health`` and ``/api/health``."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class OverallStatus(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class ComponentStatus(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    UNKNOWN = "unknown"


class HealthReport(BaseModel):
    """Per-request snapshot of dependency reachability.

    ``status`` is healthy only while every probed component is healthy.
    ``rabbitmq`` is never probed and therefore stays ``unknown``.
    """

    status: OverallStatus = OverallStatus.HEALTHY
    postgres: ComponentStatus = ComponentStatus.UNKNOWN
    redis: ComponentStatus = ComponentStatus.UNKNOWN
    rabbitmq: ComponentStatus = ComponentStatus.UNKNOWN

    def record(self, component: str, result: ComponentStatus) -> None:
        """Store a probe result and downgrade the overall status on failure."""
        setattr(self, component, result)
        if result is ComponentStatus.UNHEALTHY:
            self.status = OverallStatus.UNHEALTHY
