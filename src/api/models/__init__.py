"""
API models (Pydantic DTOs) for the update service.
"""

from src.api.models.health import HealthResponse
from src.api.models.update import (
    CreateUpdateRequest,
    CreateUpdateResponse,
    PatchUpdateRequest,
    UpdateErrorResponse,
    UpdateRecordResponse,
)

__all__: list[str] = [
    "CreateUpdateRequest",
    "CreateUpdateResponse",
    "HealthResponse",
    "PatchUpdateRequest",
    "UpdateErrorResponse",
    "UpdateRecordResponse",
]
