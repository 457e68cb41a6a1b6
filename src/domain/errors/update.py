"""Update domain errors.

These errors are the typed outcomes of the create and patch paths. Each one
maps to a distinct response class at the API boundary:

- InvalidUpdateRequestError -> client error (400)
- DuplicateCommitError -> non-fatal "already done" (304 or 409, configurable)
- UpdateNotFoundError -> client error (404)
- UpdateStorageError -> server error (500), never retried by the core
"""

from __future__ import annotations

from src.domain.exceptions import UpdateServiceError


class UpdateError(UpdateServiceError):
    """Base error for update ingestion operations."""

    pass


class InvalidUpdateRequestError(UpdateError):
    """Raised when a create or patch request is missing or malformed.

    Attributes:
        field: The offending field, if a single field is to blame.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class DuplicateCommitError(UpdateError):
    """Raised when a create is attempted for a commit that is already recorded.

    The existing record is left untouched; no notification is published.

    Attributes:
        commit: The duplicated commit identifier.
        existing_id: Id of the record already holding the commit.
    """

    def __init__(self, commit: str, existing_id: int) -> None:
        self.commit = commit
        self.existing_id = existing_id
        super().__init__(f"Update for commit {commit} already exists (id={existing_id})")


class UpdateNotFoundError(UpdateError):
    """Raised when no update matches the requested commit.

    Attributes:
        commit: The commit that was looked up.
    """

    def __init__(self, commit: str) -> None:
        self.commit = commit
        super().__init__(f"No update found for commit {commit}")


class UpdateStorageError(UpdateError):
    """Raised when the persistence layer is unavailable or fails.

    The originating driver exception is chained as ``__cause__``.

    Attributes:
        operation: The store operation that failed.
    """

    def __init__(self, operation: str, message: str = "Update storage unavailable") -> None:
        self.operation = operation
        super().__init__(f"{message} during {operation}")
