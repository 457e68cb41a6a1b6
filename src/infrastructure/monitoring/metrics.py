"""Prometheus metrics infrastructure.

Operational metrics (uptime, latency, errors) plus the update ingestion
counters:
- update_creations_total{outcome}: created, duplicate, invalid, error
- update_patches_total{outcome}: patched, not_found, invalid, error
- update_events_published_total{event_type}: created, patched
- update_event_publish_failures_total{event_type}: bus errors (record kept)
- update_subscribers: currently-connected stream subscribers

All metrics carry service and environment labels.
"""

import os
import threading
import time

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Content type for Prometheus metrics endpoint
METRICS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

# Thread lock for singleton initialization
_collector_lock = threading.Lock()

# Histogram buckets for request duration (10ms to 10s)
DEFAULT_HISTOGRAM_BUCKETS = (0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)


class MetricsCollector:
    """Collects and manages Prometheus metrics for the update service.

    Attributes:
        uptime_seconds: Gauge tracking seconds since service start.
        service_starts_total: Counter tracking service restarts.
        http_request_duration_seconds: Histogram for request latency.
        http_requests_total: Counter for all HTTP requests.
        http_requests_failed_total: Counter for failed requests (4xx, 5xx).
        update_creations_total: Create attempts by outcome.
        update_patches_total: Patch attempts by outcome.
        update_events_published_total: Events handed to the notification bus.
        update_event_publish_failures_total: Publishes that raised.
        update_subscribers: Live stream subscribers.
        startup_times: Dict mapping service name to startup timestamp.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics collector.

        Args:
            registry: Optional custom registry for testing isolation.
        """
        self._registry = registry or CollectorRegistry()
        self.histogram_buckets = DEFAULT_HISTOGRAM_BUCKETS
        self.startup_times: dict[str, float] = {}

        self._environment = os.environ.get("ENVIRONMENT", "development")
        self._service_name = os.environ.get("SERVICE_NAME", "update-service")

        self.uptime_seconds = Gauge(
            name="uptime_seconds",
            documentation="Seconds since service start",
            labelnames=["service", "environment"],
            registry=self._registry,
        )

        self.service_starts_total = Counter(
            name="service_starts_total",
            documentation="Total number of service starts/restarts",
            labelnames=["service", "environment"],
            registry=self._registry,
        )

        self.http_request_duration_seconds = Histogram(
            name="http_request_duration_seconds",
            documentation="HTTP request duration in seconds",
            labelnames=["service", "environment", "method", "endpoint"],
            buckets=self.histogram_buckets,
            registry=self._registry,
        )

        self.http_requests_total = Counter(
            name="http_requests_total",
            documentation="Total HTTP requests",
            labelnames=["service", "environment", "method", "endpoint", "status"],
            registry=self._registry,
        )

        self.http_requests_failed_total = Counter(
            name="http_requests_failed_total",
            documentation="Total failed HTTP requests (4xx, 5xx)",
            labelnames=[
                "service",
                "environment",
                "method",
                "endpoint",
                "status",
                "error_type",
            ],
            registry=self._registry,
        )

        self.update_creations_total = Counter(
            name="update_creations_total",
            documentation="Update create attempts by outcome",
            labelnames=["service", "environment", "outcome"],
            registry=self._registry,
        )

        self.update_patches_total = Counter(
            name="update_patches_total",
            documentation="Update patch attempts by outcome",
            labelnames=["service", "environment", "outcome"],
            registry=self._registry,
        )

        self.update_events_published_total = Counter(
            name="update_events_published_total",
            documentation="Update events published to live subscribers",
            labelnames=["service", "environment", "event_type"],
            registry=self._registry,
        )

        self.update_event_publish_failures_total = Counter(
            name="update_event_publish_failures_total",
            documentation="Update events the notification bus failed to publish",
            labelnames=["service", "environment", "event_type"],
            registry=self._registry,
        )

        self.update_subscribers = Gauge(
            name="update_subscribers",
            documentation="Currently connected update stream subscribers",
            labelnames=["service", "environment"],
            registry=self._registry,
        )

    def _labels(self, **extra: str) -> dict[str, str]:
        return {
            "service": self._service_name,
            "environment": self._environment,
            **extra,
        }

    def set_uptime(self, service: str, seconds: float) -> None:
        self.uptime_seconds.labels(
            service=service, environment=self._environment
        ).set(seconds)

    def increment_service_starts(self, service: str) -> None:
        self.service_starts_total.labels(
            service=service, environment=self._environment
        ).inc()

    def observe_request_duration(
        self, method: str, endpoint: str, duration: float
    ) -> None:
        """Record one request latency.

        Args:
            method: HTTP method (GET, POST, PATCH).
            endpoint: Route template, e.g. ``/update/{commit}``.
            duration: Seconds spent handling the request.
        """
        self.http_request_duration_seconds.labels(
            **self._labels(method=method, endpoint=endpoint)
        ).observe(duration)

    def increment_requests(self, method: str, endpoint: str, status: str) -> None:
        self.http_requests_total.labels(
            **self._labels(method=method, endpoint=endpoint, status=status)
        ).inc()

    def increment_failed_requests(
        self, method: str, endpoint: str, status: str, error_type: str = "http_error"
    ) -> None:
        """Count one 4xx/5xx response.

        Args:
            error_type: bad_request, unauthorized, not_found, conflict,
                internal_error, ...
        """
        self.http_requests_failed_total.labels(
            **self._labels(
                method=method, endpoint=endpoint, status=status, error_type=error_type
            )
        ).inc()

    def increment_update_creations(self, outcome: str) -> None:
        """Count one create attempt (created, duplicate, invalid or error)."""
        self.update_creations_total.labels(**self._labels(outcome=outcome)).inc()

    def increment_update_patches(self, outcome: str) -> None:
        """Count one patch attempt (patched, not_found, invalid or error)."""
        self.update_patches_total.labels(**self._labels(outcome=outcome)).inc()

    def increment_events_published(self, event_type: str) -> None:
        self.update_events_published_total.labels(
            **self._labels(event_type=event_type)
        ).inc()

    def increment_event_publish_failures(self, event_type: str) -> None:
        self.update_event_publish_failures_total.labels(
            **self._labels(event_type=event_type)
        ).inc()

    def set_subscriber_count(self, count: int) -> None:
        self.update_subscribers.labels(**self._labels()).set(count)

    def record_startup(self, service: str) -> None:
        """Record service startup time."""
        self.startup_times[service] = time.time()
        self.increment_service_starts(service)

    def get_uptime_seconds(self, service: str) -> float:
        """Get uptime in seconds for a service.

        Returns:
            Uptime in seconds, or 0.0 if service not registered.
        """
        if service not in self.startup_times:
            return 0.0
        return time.time() - self.startup_times[service]

    def update_uptime_gauges(self) -> None:
        """Update uptime gauges for all registered services."""
        for service in self.startup_times:
            self.set_uptime(service, self.get_uptime_seconds(service))

    def get_registry(self) -> CollectorRegistry:
        """Get the collector registry."""
        return self._registry


# Singleton instance
_metrics_collector: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """Get the singleton MetricsCollector instance (thread-safe).

    Uses double-checked locking for lazy initialization.
    """
    global _metrics_collector
    if _metrics_collector is None:
        with _collector_lock:
            if _metrics_collector is None:
                _metrics_collector = MetricsCollector()
    return _metrics_collector


def generate_metrics() -> bytes:
    """Generate Prometheus metrics in exposition format."""
    collector = get_metrics_collector()
    collector.update_uptime_gauges()
    return generate_latest(collector.get_registry())


def reset_metrics_collector() -> None:
    """Reset the singleton collector (for testing only)."""
    global _metrics_collector
    with _collector_lock:
        _metrics_collector = None
