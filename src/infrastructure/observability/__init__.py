"""Observability infrastructure for structured logging and correlation.

This module provides cross-cutting observability concerns for the update
service:
- Structured JSON logging with structlog
- Correlation ID management so one request's create, publish and store
  log lines can be joined
- Log processors for consistent output format

Usage:
    from src.infrastructure.observability import (
        configure_structlog,
        get_correlation_id,
        set_correlation_id,
    )

    # At startup
    configure_structlog(environment="production")

    # In request handling
    set_correlation_id(request_correlation_id)
    logger = structlog.get_logger().bind(correlation_id=get_correlation_id())
"""

from src.infrastructure.observability.correlation import (
    correlation_id_processor,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from src.infrastructure.observability.logging import (
    configure_structlog,
    get_logger_for_service,
)

__all__: list[str] = [
    "configure_structlog",
    "correlation_id_processor",
    "generate_correlation_id",
    "get_correlation_id",
    "get_logger_for_service",
    "set_correlation_id",
]
