"""Health check endpoint for the update service."""

from fastapi import APIRouter, Depends

from src.api.dependencies.update import get_notification_bus
from src.api.models.health import HealthResponse
from src.application.ports.notification_bus import NotificationBusPort

router = APIRouter(prefix="/v1", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    bus: NotificationBusPort = Depends(get_notification_bus),
) -> HealthResponse:
    """Return health status and the number of live stream subscribers."""
    return HealthResponse(status="healthy", subscribers=bus.subscriber_count())
