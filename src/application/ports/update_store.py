"""Update store port.

This module defines the abstract interface for update storage. The store is
the single source of truth for idempotency: it alone decides whether a commit
is new, and it assigns ids.

Developer Golden Rules:
1. ATOMIC CHECK-AND-INSERT - create_if_absent() is one operation, never a
   read followed by a separate write
2. NEVER OVERWRITE - a duplicate commit leaves the stored manifest untouched
3. FAIL LOUD - persistence failures raise UpdateStorageError, no retries
4. RESTRICTED MUTATION - update_by_commit() only touches channel/tainted
"""

from __future__ import annotations

from typing import Any, Protocol

from src.domain.models.update_record import UpdatePatch, UpdateRecord


class UpdateStoreProtocol(Protocol):
    """Protocol for update storage operations.

    Implementations may use PostgreSQL, in-memory storage, or other backends.

    Methods:
        create_if_absent: Atomically create a record unless the commit exists
        find_by_commit: Look up a record by commit
        update_by_commit: Apply a restricted patch to a record
        count: Number of stored records
    """

    async def create_if_absent(
        self, commit: str, manifest: Any
    ) -> tuple[UpdateRecord, bool]:
        """Create a record for the commit unless one already exists.

        Under N concurrent calls with the same commit exactly one returns
        ``was_created=True``.

        Args:
            commit: The commit identifier (idempotency key).
            manifest: Opaque manifest document.

        Returns:
            Tuple of (record, was_created). When was_created is False the
            record is the pre-existing one.

        Raises:
            UpdateStorageError: If the persistence layer fails.
        """
        ...

    async def find_by_commit(self, commit: str) -> UpdateRecord | None:
        """Retrieve a record by commit.

        Args:
            commit: The commit identifier.

        Returns:
            The record if found, None otherwise.

        Raises:
            UpdateStorageError: If the persistence layer fails.
        """
        ...

    async def update_by_commit(self, commit: str, patch: UpdatePatch) -> UpdateRecord:
        """Apply a restricted patch to the record holding the commit.

        Args:
            commit: The commit identifier.
            patch: Channel/tainted values to set.

        Returns:
            The updated record.

        Raises:
            UpdateNotFoundError: If no record holds the commit.
            UpdateStorageError: If the persistence layer fails.
        """
        ...

    async def count(self) -> int:
        """Return the number of stored records."""
        ...
