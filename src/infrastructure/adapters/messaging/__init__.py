"""Messaging adapters for live update notifications."""

from src.infrastructure.adapters.messaging.in_process_notification_bus import (
    AsyncQueueSubscription,
    InProcessNotificationBus,
)

__all__ = ["AsyncQueueSubscription", "InProcessNotificationBus"]
