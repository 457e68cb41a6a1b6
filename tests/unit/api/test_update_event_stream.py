"""Unit tests for the update event stream (SSE).

The HTTP stream never ends on its own, so the generator and the route
handler are exercised directly against a real bus.
"""

import asyncio
import json

import pytest
from sse_starlette.sse import EventSourceResponse

from src.api.routes.update import stream_update_events, update_event_stream
from src.config.update_config import UpdateServiceConfig
from src.domain.models.update_record import UpdateEvent, UpdateRecord
from src.infrastructure.adapters.messaging.in_process_notification_bus import (
    InProcessNotificationBus,
)
from src.infrastructure.monitoring.metrics import reset_metrics_collector

MANIFEST = {"version": "1.0.0"}


@pytest.fixture(autouse=True)
def reset_collector() -> None:
    reset_metrics_collector()


def _created(update_id: int, commit: str) -> UpdateEvent:
    return UpdateEvent.created(UpdateRecord(id=update_id, commit=commit, manifest=MANIFEST))


class TestUpdateEventStream:
    """Tests for update_event_stream()."""

    async def test_created_event_message(self) -> None:
        bus = InProcessNotificationBus()
        subscription = bus.subscribe()
        stream = update_event_stream(subscription, keepalive_seconds=5)

        await bus.publish(_created(2, "xyz789"))
        message = await asyncio.wait_for(stream.__anext__(), timeout=1)

        assert message["event"] == "created"
        assert message["id"] == "2"
        payload = json.loads(message["data"])
        assert payload["commit"] == "xyz789"
        assert payload["id"] == 2
        assert payload["manifest"] == MANIFEST
        await stream.aclose()

    async def test_keepalive_when_idle(self) -> None:
        bus = InProcessNotificationBus()
        stream = update_event_stream(bus.subscribe(), keepalive_seconds=0.01)

        message = await asyncio.wait_for(stream.__anext__(), timeout=1)

        assert message == {"comment": "keepalive"}
        await stream.aclose()

    async def test_events_in_publish_order(self) -> None:
        bus = InProcessNotificationBus()
        stream = update_event_stream(bus.subscribe(), keepalive_seconds=5)

        for update_id, commit in ((1, "abc123"), (2, "xyz789")):
            await bus.publish(_created(update_id, commit))

        first = await asyncio.wait_for(stream.__anext__(), timeout=1)
        second = await asyncio.wait_for(stream.__anext__(), timeout=1)

        assert [first["id"], second["id"]] == ["1", "2"]
        await stream.aclose()

    async def test_disconnect_unsubscribes(self) -> None:
        bus = InProcessNotificationBus()
        closed: list[bool] = []
        stream = update_event_stream(
            bus.subscribe(), keepalive_seconds=0.01, on_close=lambda: closed.append(True)
        )
        await asyncio.wait_for(stream.__anext__(), timeout=1)

        await stream.aclose()

        assert bus.subscriber_count() == 0
        assert closed == [True]

    async def test_stream_ends_when_bus_closes(self) -> None:
        bus = InProcessNotificationBus()
        stream = update_event_stream(bus.subscribe(), keepalive_seconds=5)

        await bus.close()

        with pytest.raises(StopAsyncIteration):
            await asyncio.wait_for(stream.__anext__(), timeout=1)


class TestStreamRoute:
    """Tests for the stream route handler."""

    async def test_handler_subscribes_before_responding(self) -> None:
        bus = InProcessNotificationBus()

        response = await stream_update_events(
            bus=bus, config=UpdateServiceConfig(stream_keepalive_seconds=1)
        )

        assert isinstance(response, EventSourceResponse)
        assert bus.subscriber_count() == 1
        assert response.headers["Cache-Control"] == "no-cache"
        await bus.close()
