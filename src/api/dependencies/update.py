"""Update API dependencies.

Dependency injection setup for update ingestion components. Every getter
returns a module-level singleton; tests replace pieces with
configure_update_dependencies() and clear them with
reset_update_dependencies().
"""

from __future__ import annotations

from src.application.ports.notification_bus import NotificationBusPort
from src.application.ports.request_authorizer import RequestAuthorizerProtocol
from src.application.ports.update_store import UpdateStoreProtocol
from src.application.services.update_ingestion_service import UpdateIngestionService
from src.application.services.update_patch_service import UpdatePatchService
from src.bootstrap.metrics import get_metrics_collector
from src.bootstrap.update_ingestion import (
    get_update_store,
    reset_update_store,
    set_update_store,
)
from src.config.update_config import UpdateServiceConfig
from src.infrastructure.adapters.messaging.in_process_notification_bus import (
    InProcessNotificationBus,
)
from src.infrastructure.adapters.security.shared_secret_authorizer import (
    SharedSecretAuthorizer,
)

_update_config: UpdateServiceConfig | None = None
_notification_bus: NotificationBusPort | None = None
_request_authorizer: RequestAuthorizerProtocol | None = None
_update_ingestion_service: UpdateIngestionService | None = None


def get_update_config() -> UpdateServiceConfig:
    """Get update service configuration.

    Loaded from environment on first use.
    """
    global _update_config
    if _update_config is None:
        _update_config = UpdateServiceConfig.from_environment()
    return _update_config


def get_update_store_dependency() -> UpdateStoreProtocol:
    """Get the update store (PostgreSQL or in-memory)."""
    return get_update_store()


def get_notification_bus() -> NotificationBusPort:
    """Get the in-process notification bus.

    There is exactly one bus per process; every stream subscriber and every
    publishing request share it.
    """
    global _notification_bus
    if _notification_bus is None:
        _notification_bus = InProcessNotificationBus(
            max_pending_events=get_update_config().subscriber_queue_size
        )
    return _notification_bus


def get_request_authorizer() -> RequestAuthorizerProtocol:
    """Get the authorizer consulted by write routes."""
    global _request_authorizer
    if _request_authorizer is None:
        _request_authorizer = SharedSecretAuthorizer(
            get_update_config().internal_api_secret
        )
    return _request_authorizer


def get_update_ingestion_service() -> UpdateIngestionService:
    """Get update ingestion service instance.

    Creates the service with:
    - UpdateStore (PostgreSQL or stub)
    - InProcessNotificationBus
    - UpdatePatchService with the configured field policy
    - Prometheus metrics collector
    """
    global _update_ingestion_service
    if _update_ingestion_service is None:
        config = get_update_config()
        store = get_update_store()
        _update_ingestion_service = UpdateIngestionService(
            store=store,
            bus=get_notification_bus(),
            config=config,
            patch_service=UpdatePatchService(store, policy=config.patch_field_policy),
            metrics=get_metrics_collector(),
        )
    return _update_ingestion_service


# Testing helper functions


def configure_update_dependencies(
    *,
    config: UpdateServiceConfig | None = None,
    store: UpdateStoreProtocol | None = None,
    bus: NotificationBusPort | None = None,
    authorizer: RequestAuthorizerProtocol | None = None,
) -> None:
    """Replace dependencies for a test scenario.

    Anything not given keeps its current (or lazily created) instance. The
    ingestion service is always rebuilt.
    """
    global _update_config, _notification_bus, _request_authorizer
    global _update_ingestion_service

    if config is not None:
        _update_config = config
        # Bus buffer size and authorizer secret come from config
        if bus is None:
            _notification_bus = None
        if authorizer is None:
            _request_authorizer = None
    if store is not None:
        set_update_store(store)
    if bus is not None:
        _notification_bus = bus
    if authorizer is not None:
        _request_authorizer = authorizer
    _update_ingestion_service = None


def reset_update_dependencies() -> None:
    """Reset all singleton instances for testing.

    Call this in test fixtures to ensure clean state between tests.
    """
    global _update_config
    global _notification_bus
    global _request_authorizer
    global _update_ingestion_service

    _update_config = None
    _notification_bus = None
    _request_authorizer = None
    _update_ingestion_service = None
    reset_update_store()
