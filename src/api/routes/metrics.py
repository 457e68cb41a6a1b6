"""Metrics endpoint for Prometheus scraping.

Exposes operational and update ingestion metrics in Prometheus exposition
format.
"""

from fastapi import APIRouter, Response

from src.bootstrap.metrics import get_metrics_exporter

router = APIRouter(prefix="/v1", tags=["metrics"])


@router.get(
    "/metrics",
    summary="Prometheus metrics endpoint",
    description="Returns metrics in Prometheus exposition format for scraping.",
    response_class=Response,
    responses={
        200: {
            "description": "Metrics in Prometheus format",
            "content": {"text/plain": {}},
        }
    },
)
async def get_metrics() -> Response:
    """Get metrics in Prometheus format.

    Includes uptime, request latency/errors, update creations and patches by
    outcome, published events and live subscribers.
    """
    exporter = get_metrics_exporter()
    return Response(
        content=exporter.generate_metrics(),
        media_type=exporter.content_type,
    )
