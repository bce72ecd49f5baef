"""Domain-specific exceptions for the API server.

Every startup failure raises one of these so the entry point can report
exactly which step broke. Health probes never raise; see app.core.probes.
"""

from __future__ import annotations


class StartupError(Exception):
    """Base exception for failures that abort process startup."""

    step = "startup"


class ConfigurationError(StartupError):
    """Environment configuration is invalid (e.g. APP_PORT is not a port)."""

    step = "configuration"


class DatabaseConnectionError(StartupError):
    """Could not open the PostgreSQL pool; check DATABASE_URL."""

    step = "PostgreSQL"


class CacheConnectionError(StartupError):
    """Could not connect to Redis; check REDIS_URL."""

    step = "Redis"


class BrokerConnectionError(StartupError):
    """Could not connect, open a channel, or declare the queue on RabbitMQ."""

    step = "RabbitMQ"
