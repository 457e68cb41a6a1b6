"""Base exception classes for the update service domain layer."""


class UpdateServiceError(Exception):
    """Base exception for all domain errors.

    All domain-specific exceptions MUST inherit from this class so that
    routes can tell recognised outcomes apart from unexpected failures.

    Subclasses:
    - InvalidUpdateRequestError
    - DuplicateCommitError
    - UpdateNotFoundError
    - UpdateStorageError
    """

    def __init__(self, message: str = "") -> None:
        """Initialize the exception with an optional message.

        Args:
            message: Human-readable error description.
        """
        super().__init__(message)
