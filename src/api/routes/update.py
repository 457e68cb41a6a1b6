"""Update API routes.

FastAPI router for update ingestion, patching, lookup and the live event
stream.

Developer Golden Rules:
1. AUTHORIZE FIRST - write routes check the internal secret before any core logic
2. DUPLICATES ARE NOT ERRORS - a repeated commit answers 304 (or 409 when configured)
3. FAIL LOUD - Return meaningful RFC 7807 error responses
4. STREAM IS READ-ONLY - no authentication, no replay of past events
"""

import json
from collections.abc import AsyncIterator, Callable

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import Response
from sse_starlette.sse import EventSourceResponse

from src.api.auth.internal_secret_auth import require_internal_secret
from src.api.dependencies.update import (
    get_notification_bus,
    get_update_config,
    get_update_ingestion_service,
)
from src.api.models.update import (
    CreateUpdateRequest,
    CreateUpdateResponse,
    PatchUpdateRequest,
    UpdateErrorResponse,
    UpdateRecordResponse,
)
from src.application.ports.notification_bus import (
    NotificationBusPort,
    UpdateSubscriptionProtocol,
)
from src.application.services.update_ingestion_service import UpdateIngestionService
from src.bootstrap.metrics import get_metrics_collector
from src.config.update_config import UpdateServiceConfig
from src.domain.errors.update import (
    DuplicateCommitError,
    InvalidUpdateRequestError,
    UpdateNotFoundError,
    UpdateStorageError,
)

router = APIRouter(prefix="/update", tags=["updates"])

ERROR_TYPE_PREFIX = "urn:updates:error"


def _problem(
    request: Request, status_code: int, error_type: str, title: str, detail: str
) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={
            "type": f"{ERROR_TYPE_PREFIX}:{error_type}",
            "title": title,
            "status": status_code,
            "detail": detail,
            "instance": str(request.url.path),
        },
    )


def _storage_problem(request: Request) -> HTTPException:
    return _problem(
        request,
        500,
        "storage-unavailable",
        "Storage Unavailable",
        "The update could not be processed because storage is unavailable",
    )


# =============================================================================
# Event Stream - MUST be before /{commit} due to route matching
# =============================================================================


async def update_event_stream(
    subscription: UpdateSubscriptionProtocol,
    keepalive_seconds: float,
    on_close: Callable[[], None] | None = None,
) -> AsyncIterator[dict[str, str]]:
    """Turn a bus subscription into SSE messages.

    Each event becomes ``event: <type>`` with the full record as JSON data.
    An idle interval yields a keepalive comment. The subscription is closed
    when the client goes away.
    """
    try:
        while not subscription.closed:
            event = await subscription.next_event(timeout=keepalive_seconds)
            if event is None:
                if subscription.closed:
                    break
                yield {"comment": "keepalive"}
                continue
            yield {
                "event": event.event_type.value,
                "data": json.dumps(event.record.to_dict()),
                "id": str(event.record.id),
            }
    finally:
        subscription.close()
        if on_close is not None:
            on_close()


@router.get(
    "/events",
    summary="Stream update events",
    description=(
        "Server-Sent Events stream of update events. A 'created' event carrying "
        "the full record is sent for every newly accepted update. Only events "
        "published after the connection opens are delivered."
    ),
)
async def stream_update_events(
    bus: NotificationBusPort = Depends(get_notification_bus),
    config: UpdateServiceConfig = Depends(get_update_config),
) -> EventSourceResponse:
    """Stream update events via Server-Sent Events.

    No authentication required. Sends keepalive comments while idle.
    """
    # Subscribe before the response starts so no event published after the
    # client sees the headers can be missed
    subscription = bus.subscribe()
    metrics = get_metrics_collector()
    metrics.set_subscriber_count(bus.subscriber_count())

    def _record_disconnect() -> None:
        metrics.set_subscriber_count(bus.subscriber_count())

    return EventSourceResponse(
        update_event_stream(
            subscription,
            keepalive_seconds=config.stream_keepalive_seconds,
            on_close=_record_disconnect,
        ),
        headers={
            "X-Accel-Buffering": "no",  # Disable nginx buffering
            "Cache-Control": "no-cache",
        },
    )


# =============================================================================
# Create / Patch / Get
# =============================================================================


@router.post(
    "",
    response_model=CreateUpdateResponse,
    status_code=201,
    dependencies=[Depends(require_internal_secret)],
    responses={
        304: {"description": "Commit already recorded (default duplicate status)"},
        400: {"model": UpdateErrorResponse, "description": "Missing or malformed input"},
        401: {"model": UpdateErrorResponse, "description": "Missing or wrong secret"},
        409: {
            "model": UpdateErrorResponse,
            "description": "Commit already recorded (when configured)",
        },
        500: {"model": UpdateErrorResponse, "description": "Storage unavailable"},
    },
    summary="Create an update",
    description=(
        "Record a new update for a commit and notify live subscribers. "
        "Repeating a commit creates nothing and notifies nobody."
    ),
)
async def create_update(
    request_data: CreateUpdateRequest,
    request: Request,
    service: UpdateIngestionService = Depends(get_update_ingestion_service),
) -> CreateUpdateResponse | Response:
    """Create an update, or report that its commit already exists."""
    try:
        result = await service.create_update(request_data.commit, request_data.manifest)
    except InvalidUpdateRequestError as e:
        raise _problem(request, 400, "invalid-update", "Invalid Update", str(e)) from None
    except DuplicateCommitError as e:
        if service.config.duplicate_status_code == 409:
            raise _problem(
                request, 409, "duplicate-commit", "Duplicate Commit", str(e)
            ) from None
        return Response(status_code=304)
    except UpdateStorageError:
        raise _storage_problem(request) from None

    return CreateUpdateResponse(id=result.update_id)


@router.patch(
    "",
    response_model=UpdateRecordResponse,
    dependencies=[Depends(require_internal_secret)],
    responses={
        400: {"model": UpdateErrorResponse, "description": "Invalid patch"},
        401: {"model": UpdateErrorResponse, "description": "Missing or wrong secret"},
        404: {"model": UpdateErrorResponse, "description": "Unknown commit"},
        500: {"model": UpdateErrorResponse, "description": "Storage unavailable"},
    },
    summary="Patch an update",
    description="Set the release channel and/or tainted flag of an existing update.",
)
async def patch_update(
    request_data: PatchUpdateRequest,
    request: Request,
    service: UpdateIngestionService = Depends(get_update_ingestion_service),
) -> UpdateRecordResponse:
    """Patch channel/tainted on the update identified by commit."""
    try:
        record = await service.patch_update(
            request_data.commit, request_data.patch_fields()
        )
    except InvalidUpdateRequestError as e:
        raise _problem(request, 400, "invalid-patch", "Invalid Patch", str(e)) from None
    except UpdateNotFoundError as e:
        raise _problem(request, 404, "update-not-found", "Update Not Found", str(e)) from None
    except UpdateStorageError:
        raise _storage_problem(request) from None

    return UpdateRecordResponse.from_record(record)


async def _lookup(
    commit: str, request: Request, service: UpdateIngestionService
) -> UpdateRecordResponse:
    try:
        record = await service.get_update(commit)
    except UpdateNotFoundError as e:
        raise _problem(request, 404, "update-not-found", "Update Not Found", str(e)) from None
    except UpdateStorageError:
        raise _storage_problem(request) from None

    return UpdateRecordResponse.from_record(record)


_LOOKUP_RESPONSES: dict[int | str, dict[str, object]] = {
    404: {"model": UpdateErrorResponse, "description": "Unknown commit"},
    500: {"model": UpdateErrorResponse, "description": "Storage unavailable"},
}


@router.get(
    "",
    response_model=UpdateRecordResponse,
    responses={
        400: {"model": UpdateErrorResponse, "description": "Missing commit"},
        **_LOOKUP_RESPONSES,
    },
    summary="Find an update by commit",
    description=(
        "Query-string form of the lookup. Reaches every commit, including "
        "one named 'events', which the path form cannot address."
    ),
)
async def find_update(
    request: Request,
    commit: str = Query(..., min_length=1),
    service: UpdateIngestionService = Depends(get_update_ingestion_service),
) -> UpdateRecordResponse:
    """Look up an update by ``?commit=``."""
    return await _lookup(commit, request, service)


@router.get(
    "/{commit}",
    response_model=UpdateRecordResponse,
    responses=_LOOKUP_RESPONSES,
    summary="Get an update",
    description="Path form of the lookup. ``/update/events`` is the event stream.",
)
async def get_update(
    commit: str,
    request: Request,
    service: UpdateIngestionService = Depends(get_update_ingestion_service),
) -> UpdateRecordResponse:
    """Look up an update by commit."""
    return await _lookup(commit, request, service)
