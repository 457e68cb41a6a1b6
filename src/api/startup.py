"""Startup and shutdown hooks for the update API.

Startup:
1. Configure structured logging
2. Optionally create the ``updates`` table (UPDATE_CREATE_SCHEMA)
3. Record service startup for metrics tracking

Shutdown:
1. End every open event stream
2. Dispose of the database engine

Usage in FastAPI:
    @asynccontextmanager
    async def lifespan(app):
        configure_logging()
        await initialize_update_schema()
        record_service_startup()
        yield
        await shutdown_update_service()
"""

import os

from structlog import get_logger

from src.infrastructure.monitoring.metrics import get_metrics_collector
from src.infrastructure.observability import configure_structlog

ENVIRONMENT_VAR = "ENVIRONMENT"
DEFAULT_ENVIRONMENT = "development"
CREATE_SCHEMA_VAR = "UPDATE_CREATE_SCHEMA"
SERVICE_NAME = "update-api"

logger = get_logger()


def configure_logging() -> None:
    """Configure structured logging for the application.

    Based on the ENVIRONMENT variable:
    - production: JSON output for log aggregation
    - development (default): Colored console output

    Should be called first in the startup sequence, before any logging occurs.
    """
    environment = os.getenv(ENVIRONMENT_VAR, DEFAULT_ENVIRONMENT)
    configure_structlog(environment=environment)

    log = get_logger().bind(component="startup_logging")
    log.info("structured_logging_configured", environment=environment)


async def initialize_update_schema() -> bool:
    """Create the ``updates`` table when asked to and a database is configured.

    Returns:
        True if the schema step ran.
    """
    enabled = os.getenv(CREATE_SCHEMA_VAR, "").lower() in ("1", "true", "yes")
    if not enabled or not os.getenv("DATABASE_URL"):
        return False

    from src.bootstrap.database import get_engine
    from src.infrastructure.adapters.persistence.schema import create_schema

    log = logger.bind(component="startup_schema")
    await create_schema(get_engine())
    log.info("update_schema_ready")
    return True


def record_service_startup(service_name: str = SERVICE_NAME) -> None:
    """Record service startup for uptime and restart tracking.

    Args:
        service_name: Name of the service (default: "update-api").
    """
    log = logger.bind(component="startup_metrics", service=service_name)
    log.info("recording_service_startup")

    get_metrics_collector().record_startup(service_name)

    log.info("service_startup_recorded", service=service_name)


async def shutdown_update_service() -> None:
    """Close live streams and release the database engine."""
    from src.api.dependencies.update import get_notification_bus
    from src.bootstrap.database import close_database_engine

    log = logger.bind(component="shutdown")
    await get_notification_bus().close()
    await close_database_engine()
    log.info("update_service_stopped")
