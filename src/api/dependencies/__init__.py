"""API dependencies for dependency injection."""

from src.api.dependencies.update import (
    configure_update_dependencies,
    get_notification_bus,
    get_request_authorizer,
    get_update_config,
    get_update_ingestion_service,
    get_update_store_dependency,
    reset_update_dependencies,
)

__all__: list[str] = [
    "configure_update_dependencies",
    "get_notification_bus",
    "get_request_authorizer",
    "get_update_config",
    "get_update_ingestion_service",
    "get_update_store_dependency",
    "reset_update_dependencies",
]
