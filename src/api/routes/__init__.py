"""
API routes for the update service.

Available routers:
- health: Health check endpoint
- metrics: Prometheus scrape endpoint
- update: Update create/patch/get and the live event stream
"""

from src.api.routes.health import router as health_router
from src.api.routes.metrics import router as metrics_router
from src.api.routes.update import router as update_router

__all__: list[str] = ["health_router", "metrics_router", "update_router"]
