"""Unit tests for the in-process notification bus."""

import asyncio

import pytest

from src.domain.models.update_record import UpdateEvent, UpdateEventType, UpdateRecord
from src.infrastructure.adapters.messaging.in_process_notification_bus import (
    InProcessNotificationBus,
)


def _event(update_id: int, commit: str | None = None) -> UpdateEvent:
    record = UpdateRecord(
        id=update_id, commit=commit or f"commit-{update_id}", manifest={}
    )
    return UpdateEvent.created(record)


@pytest.fixture
def bus() -> InProcessNotificationBus:
    return InProcessNotificationBus(max_pending_events=3)


class TestPublish:
    """Tests for publish()."""

    async def test_publish_without_subscribers(self, bus: InProcessNotificationBus) -> None:
        assert await bus.publish(_event(1)) == 0

    async def test_every_subscriber_receives_event(
        self, bus: InProcessNotificationBus
    ) -> None:
        first = bus.subscribe()
        second = bus.subscribe()

        delivered = await bus.publish(_event(1, "abc123"))

        assert delivered == 2
        for subscription in (first, second):
            event = await subscription.next_event(timeout=1)
            assert event is not None
            assert event.event_type == UpdateEventType.CREATED
            assert event.record.commit == "abc123"

    async def test_order_matches_publish_order(
        self, bus: InProcessNotificationBus
    ) -> None:
        subscription = bus.subscribe()
        for update_id in (1, 2, 3):
            await bus.publish(_event(update_id))

        received = [
            (await subscription.next_event(timeout=1)).record.id  # type: ignore[union-attr]
            for _ in range(3)
        ]

        assert received == [1, 2, 3]

    async def test_no_replay_for_late_subscriber(
        self, bus: InProcessNotificationBus
    ) -> None:
        await bus.publish(_event(1))

        late = bus.subscribe()

        assert late.pending_count() == 0
        assert await late.next_event(timeout=0.01) is None

    async def test_full_subscriber_drops_without_blocking(
        self, bus: InProcessNotificationBus
    ) -> None:
        """A lagging subscriber loses events; others still receive them."""
        slow = bus.subscribe()
        for update_id in (1, 2, 3):
            await bus.publish(_event(update_id))
        fast = bus.subscribe()

        delivered = await asyncio.wait_for(bus.publish(_event(4)), timeout=1)

        assert delivered == 1
        assert slow.dropped_count == 1
        assert slow.pending_count() == 3
        event = await fast.next_event(timeout=1)
        assert event is not None and event.record.id == 4


class TestSubscriptionLifecycle:
    """Tests for subscribe/unsubscribe/close."""

    async def test_subscriber_count(self, bus: InProcessNotificationBus) -> None:
        first = bus.subscribe()
        bus.subscribe()

        assert bus.subscriber_count() == 2

        first.close()

        assert bus.subscriber_count() == 1
        assert first.closed is True

    async def test_unsubscribe_closes_subscription(
        self, bus: InProcessNotificationBus
    ) -> None:
        subscription = bus.subscribe()

        assert bus.unsubscribe(subscription.subscription_id) is True
        assert bus.unsubscribe(subscription.subscription_id) is False
        assert subscription.closed is True

    async def test_closed_subscription_receives_nothing(
        self, bus: InProcessNotificationBus
    ) -> None:
        subscription = bus.subscribe()
        subscription.close()

        assert await bus.publish(_event(1)) == 0
        assert await subscription.next_event(timeout=0.01) is None

    async def test_close_wakes_waiting_consumer(
        self, bus: InProcessNotificationBus
    ) -> None:
        subscription = bus.subscribe()
        waiter = asyncio.create_task(subscription.next_event())
        await asyncio.sleep(0)

        subscription.close()

        assert await asyncio.wait_for(waiter, timeout=1) is None

    async def test_async_iteration_ends_on_close(
        self, bus: InProcessNotificationBus
    ) -> None:
        subscription = bus.subscribe()
        await bus.publish(_event(1))
        await bus.publish(_event(2))

        received = []
        async for event in subscription:
            received.append(event.record.id)
            if len(received) == 2:
                subscription.close()

        assert received == [1, 2]

    async def test_bus_close_ends_all_streams(
        self, bus: InProcessNotificationBus
    ) -> None:
        subscriptions = [bus.subscribe() for _ in range(3)]

        await bus.close()

        assert bus.subscriber_count() == 0
        assert all(subscription.closed for subscription in subscriptions)

    def test_rejects_non_positive_buffer(self) -> None:
        with pytest.raises(ValueError):
            InProcessNotificationBus(max_pending_events=0)
