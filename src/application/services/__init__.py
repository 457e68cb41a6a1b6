"""Application services - Use case orchestration.

Available services:
- UpdateIngestionService: Create/patch/get orchestration over store and bus
- UpdatePatchService: Restricted-field patch handler
"""

from src.application.services.update_ingestion_service import (
    CreateUpdateResult,
    UpdateIngestionService,
)
from src.application.services.update_patch_service import (
    PATCHABLE_FIELDS,
    UpdatePatchService,
)

__all__: list[str] = [
    "PATCHABLE_FIELDS",
    "CreateUpdateResult",
    "UpdateIngestionService",
    "UpdatePatchService",
]
