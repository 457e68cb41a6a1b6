"""Domain models for the update service.

Contains value objects and domain models that represent
core business concepts. These models are immutable and
contain no infrastructure dependencies.
"""

from src.domain.models.update_record import (
    UpdateEvent,
    UpdateEventType,
    UpdatePatch,
    UpdateRecord,
)

__all__: list[str] = [
    "UpdateEvent",
    "UpdateEventType",
    "UpdatePatch",
    "UpdateRecord",
]
