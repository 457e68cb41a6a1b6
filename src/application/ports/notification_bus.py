"""Port definition for the update Notification Bus.

The ingestion service PUBLISHES events. Live clients SUBSCRIBE independently.

The publisher never waits for subscribers to consume an event, and a
subscriber that is slow or gone never fails the publishing request.
Subscriptions start empty: there is no backlog or replay.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Protocol
from uuid import UUID

from src.domain.models.update_record import UpdateEvent


class UpdateSubscriptionProtocol(Protocol):
    """A live, non-restartable stream of update events."""

    @property
    def subscription_id(self) -> UUID:
        """Identifier of this subscription."""
        ...

    @property
    def closed(self) -> bool:
        """Whether the subscription has been closed."""
        ...

    async def next_event(self, timeout: float | None = None) -> UpdateEvent | None:
        """Wait for the next event.

        Args:
            timeout: Seconds to wait; None waits indefinitely.

        Returns:
            The next event, or None on timeout or once closed.
        """
        ...

    def close(self) -> None:
        """Stop receiving events."""
        ...

    def __aiter__(self) -> AsyncIterator[UpdateEvent]: ...


class NotificationBusPort(ABC):
    """Port for publishing update events to live subscribers."""

    @abstractmethod
    async def publish(self, event: UpdateEvent) -> int:
        """Deliver event to every currently-connected subscriber.

        Delivery is at-most-once and best-effort per subscriber. Per
        subscriber, events arrive in publish order.

        Args:
            event: The event to publish.

        Returns:
            Number of subscribers the event was delivered to.
        """
        ...

    @abstractmethod
    def subscribe(self) -> UpdateSubscriptionProtocol:
        """Open a new subscription that sees only future events."""
        ...

    @abstractmethod
    def unsubscribe(self, subscription_id: UUID) -> bool:
        """Remove a subscription.

        Returns:
            True if the subscription was found and removed.
        """
        ...

    @abstractmethod
    def subscriber_count(self) -> int:
        """Number of currently-connected subscribers."""
        ...

    async def close(self) -> None:
        """End every open subscription (graceful shutdown)."""
        return None
