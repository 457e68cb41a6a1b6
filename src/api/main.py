"""FastAPI application entry point for the update service."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.api.middleware.logging_middleware import LoggingMiddleware
from src.api.middleware.metrics_middleware import MetricsMiddleware
from src.api.routes.health import router as health_router
from src.api.routes.metrics import router as metrics_router
from src.api.routes.update import router as update_router
from src.api.startup import (
    configure_logging,
    initialize_update_schema,
    record_service_startup,
    shutdown_update_service,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_logging()
    await initialize_update_schema()
    record_service_startup()
    yield
    await shutdown_update_service()


app = FastAPI(
    title="Update Ingestion Service",
    description="Idempotent update ingestion with live notifications",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(MetricsMiddleware)
app.add_middleware(LoggingMiddleware)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies as 400 problem details."""
    messages = [
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}"
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "detail": {
                "type": "urn:updates:error:invalid-request",
                "title": "Invalid Request",
                "status": 400,
                "detail": "; ".join(messages) or "Malformed request",
                "instance": str(request.url.path),
            }
        },
    )


app.include_router(health_router)
app.include_router(metrics_router)
app.include_router(update_router)
