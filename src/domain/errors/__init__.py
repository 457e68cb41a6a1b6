"""Domain errors for the update service.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from UpdateServiceError.
"""

from src.domain.errors.update import (
    DuplicateCommitError,
    InvalidUpdateRequestError,
    UpdateError,
    UpdateNotFoundError,
    UpdateStorageError,
)

__all__: list[str] = [
    "DuplicateCommitError",
    "InvalidUpdateRequestError",
    "UpdateError",
    "UpdateNotFoundError",
    "UpdateStorageError",
]
