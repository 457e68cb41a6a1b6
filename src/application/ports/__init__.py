"""Application ports - Abstract interfaces for infrastructure adapters.

Available ports:
- UpdateStoreProtocol: Durable, idempotent update storage
- NotificationBusPort: Publish/subscribe for live update events
- RequestAuthorizerProtocol: Write-request authorization
- MetricsExporterPort: Metrics exposition
"""

from src.application.ports.metrics_exporter import MetricsExporterPort
from src.application.ports.notification_bus import (
    NotificationBusPort,
    UpdateSubscriptionProtocol,
)
from src.application.ports.request_authorizer import RequestAuthorizerProtocol
from src.application.ports.update_store import UpdateStoreProtocol

__all__: list[str] = [
    "MetricsExporterPort",
    "NotificationBusPort",
    "RequestAuthorizerProtocol",
    "UpdateStoreProtocol",
    "UpdateSubscriptionProtocol",
]
