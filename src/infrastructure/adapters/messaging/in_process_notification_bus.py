"""In-process notification bus for update events.

Each subscriber owns a bounded asyncio.Queue. Publishing enqueues the event
on every live subscriber's queue without awaiting, so by the time publish()
returns the event is buffered for every subscriber that was connected when
it was called.

Developer Golden Rules:
1. NEVER BLOCK THE PUBLISHER - a full queue drops the event for that
   subscriber only, with a warning
2. FIFO PER SUBSCRIBER - queue order is publish order
3. NO REPLAY - a new subscription starts empty
4. CLEAN UP - closing a subscription removes it from the bus
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from uuid import UUID, uuid4

import structlog

from src.application.ports.notification_bus import (
    NotificationBusPort,
    UpdateSubscriptionProtocol,
)
from src.domain.models.update_record import UpdateEvent

log = structlog.get_logger()

DEFAULT_MAX_PENDING_EVENTS = 100


class AsyncQueueSubscription(UpdateSubscriptionProtocol):
    """Subscription backed by a bounded asyncio.Queue.

    Iterating the subscription yields events until it is closed.

    Attributes:
        _queue: Pending events; None is the close sentinel.
        _on_close: Callback removing the subscription from its bus.
    """

    def __init__(
        self,
        max_pending_events: int,
        on_close: Callable[[UUID], object] | None = None,
    ) -> None:
        self._subscription_id = uuid4()
        self._queue: asyncio.Queue[UpdateEvent | None] = asyncio.Queue(
            maxsize=max_pending_events + 1
        )
        self._max_pending_events = max_pending_events
        self._on_close = on_close
        self._closed = False
        self._dropped = 0

    @property
    def subscription_id(self) -> UUID:
        return self._subscription_id

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def dropped_count(self) -> int:
        """Events dropped because this subscriber fell behind."""
        return self._dropped

    def pending_count(self) -> int:
        """Events buffered and not yet consumed."""
        return self._queue.qsize()

    def offer(self, event: UpdateEvent) -> bool:
        """Enqueue an event without waiting.

        Returns:
            True if buffered, False if closed or the queue is full.
        """
        if self._closed:
            return False
        # One slot is held back for the close sentinel
        if self._queue.qsize() >= self._max_pending_events:
            self._dropped += 1
            return False
        self._queue.put_nowait(event)
        return True

    async def next_event(self, timeout: float | None = None) -> UpdateEvent | None:
        """Wait for the next event, or None on timeout/close."""
        if self._closed:
            return None
        try:
            if timeout is None:
                event = await self._queue.get()
            else:
                event = await asyncio.wait_for(self._queue.get(), timeout=timeout)
        except asyncio.TimeoutError:
            return None
        if event is None or self._closed:
            return None
        return event

    def close(self) -> None:
        """Stop receiving events and detach from the bus."""
        if self._closed:
            return
        self._closed = True
        if not self._queue.full():
            self._queue.put_nowait(None)
        if self._on_close is not None:
            self._on_close(self._subscription_id)

    async def __aiter__(self) -> AsyncIterator[UpdateEvent]:
        while True:
            event = await self.next_event()
            if event is None:
                return
            yield event


class InProcessNotificationBus(NotificationBusPort):
    """Single-process publish/subscribe bus for update events.

    Attributes:
        _max_pending_events: Per-subscriber buffer size.
        _subscriptions: Live subscriptions by id.
    """

    def __init__(self, max_pending_events: int = DEFAULT_MAX_PENDING_EVENTS) -> None:
        """Initialize the bus.

        Args:
            max_pending_events: Events buffered per subscriber before dropping.
        """
        if max_pending_events < 1:
            raise ValueError(
                f"max_pending_events must be positive, got {max_pending_events}"
            )
        self._max_pending_events = max_pending_events
        self._subscriptions: dict[UUID, AsyncQueueSubscription] = {}

    async def publish(self, event: UpdateEvent) -> int:
        """Buffer the event for every live subscriber.

        Returns:
            Number of subscribers the event was buffered for.
        """
        delivered = 0
        for subscription_id, subscription in list(self._subscriptions.items()):
            if subscription.closed:
                self._subscriptions.pop(subscription_id, None)
                continue
            if subscription.offer(event):
                delivered += 1
            else:
                log.warning(
                    "subscriber_lagging",
                    subscription_id=str(subscription_id),
                    event_type=event.event_type.value,
                    commit=event.record.commit,
                    dropped_total=subscription.dropped_count,
                )

        log.info(
            "update_event_published",
            event_type=event.event_type.value,
            update_id=event.record.id,
            commit=event.record.commit,
            subscribers=delivered,
        )
        return delivered

    def subscribe(self) -> AsyncQueueSubscription:
        """Open a subscription that sees only events published from now on."""
        subscription = AsyncQueueSubscription(
            max_pending_events=self._max_pending_events,
            on_close=self.unsubscribe,
        )
        self._subscriptions[subscription.subscription_id] = subscription
        log.info(
            "subscriber_connected",
            subscription_id=str(subscription.subscription_id),
            subscribers=len(self._subscriptions),
        )
        return subscription

    def unsubscribe(self, subscription_id: UUID) -> bool:
        """Remove a subscription and close it."""
        subscription = self._subscriptions.pop(subscription_id, None)
        if subscription is None:
            return False
        subscription.close()
        log.info(
            "subscriber_disconnected",
            subscription_id=str(subscription_id),
            subscribers=len(self._subscriptions),
        )
        return True

    def subscriber_count(self) -> int:
        """Number of live subscriptions."""
        return len(self._subscriptions)

    async def close(self) -> None:
        """Close every subscription (graceful shutdown)."""
        for subscription_id in list(self._subscriptions):
            self.unsubscribe(subscription_id)
