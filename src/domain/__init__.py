"""
Domain layer - Pure business logic for the update service.

This layer contains:
- Domain models (UpdateRecord, UpdatePatch, UpdateEvent)
- Domain exceptions

CRITICAL: This layer must NOT import from application, infrastructure, or api.
Only stdlib and typing imports are allowed.
"""

from src.domain.exceptions import UpdateServiceError
from src.domain.models import UpdateEvent, UpdateEventType, UpdatePatch, UpdateRecord

__all__: list[str] = [
    "UpdateEvent",
    "UpdateEventType",
    "UpdatePatch",
    "UpdateRecord",
    "UpdateServiceError",
]
