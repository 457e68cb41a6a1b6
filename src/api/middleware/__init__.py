"""API middleware components."""

from src.api.middleware.logging_middleware import LoggingMiddleware
from src.api.middleware.metrics_middleware import MetricsMiddleware

__all__: list[str] = [
    "LoggingMiddleware",
    "MetricsMiddleware",
]
