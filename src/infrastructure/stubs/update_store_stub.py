"""Update store stub implementation.

This module provides an in-memory implementation of UpdateStoreProtocol for
development and testing purposes.

Atomicity: every check-and-write runs inside one asyncio.Lock critical
section, the in-memory equivalent of a unique-key-enforced transactional
insert.
"""

from __future__ import annotations

import asyncio
import copy
import dataclasses
from datetime import datetime, timezone
from typing import Any

from src.application.ports.update_store import UpdateStoreProtocol
from src.domain.errors.update import UpdateNotFoundError, UpdateStorageError
from src.domain.models.update_record import UpdatePatch, UpdateRecord


class UpdateStoreStub(UpdateStoreProtocol):
    """In-memory stub implementation of UpdateStoreProtocol.

    This stub stores updates in memory for development and testing.
    It is NOT suitable for production use.

    Attributes:
        _records: Dictionary mapping commit to UpdateRecord.
        _next_id: Next id to assign; ids are never reused.
        _unavailable: When True every operation raises UpdateStorageError.
    """

    def __init__(self) -> None:
        """Initialize the stub with empty storage."""
        self._records: dict[str, UpdateRecord] = {}
        self._next_id = 1
        self._unavailable = False
        self._lock = asyncio.Lock()

    async def create_if_absent(
        self, commit: str, manifest: Any
    ) -> tuple[UpdateRecord, bool]:
        """Atomically create a record unless the commit already exists.

        Args:
            commit: The commit identifier.
            manifest: Opaque manifest document (deep-copied on insert).

        Returns:
            Tuple of (record, was_created).

        Raises:
            UpdateStorageError: If the stub has been marked unavailable.
        """
        async with self._lock:
            self._check_available("create_if_absent")

            existing = self._records.get(commit)
            if existing is not None:
                return _detached(existing), False

            now = datetime.now(timezone.utc)
            record = UpdateRecord(
                id=self._next_id,
                commit=commit,
                manifest=copy.deepcopy(manifest),
                created_at=now,
                updated_at=now,
            )
            self._next_id += 1
            self._records[commit] = record
            return _detached(record), True

    async def find_by_commit(self, commit: str) -> UpdateRecord | None:
        """Retrieve a record by commit."""
        self._check_available("find_by_commit")
        record = self._records.get(commit)
        return None if record is None else _detached(record)

    async def update_by_commit(self, commit: str, patch: UpdatePatch) -> UpdateRecord:
        """Apply a restricted patch to the record holding the commit.

        An empty patch returns the record unchanged.

        Raises:
            UpdateNotFoundError: If no record holds the commit.
            UpdateStorageError: If the stub has been marked unavailable.
        """
        async with self._lock:
            self._check_available("update_by_commit")

            record = self._records.get(commit)
            if record is None:
                raise UpdateNotFoundError(commit)
            if patch.is_empty():
                return _detached(record)

            updated = record.with_patch(patch)
            self._records[commit] = updated
            return _detached(updated)

    async def count(self) -> int:
        """Return the number of stored records."""
        self._check_available("count")
        return len(self._records)

    def set_unavailable(self, unavailable: bool = True) -> None:
        """Simulate the storage backend going down (for testing)."""
        self._unavailable = unavailable

    def clear(self) -> None:
        """Clear all records (for testing). Ids keep increasing."""
        self._records.clear()

    def _check_available(self, operation: str) -> None:
        if self._unavailable:
            raise UpdateStorageError(operation)


def _detached(record: UpdateRecord) -> UpdateRecord:
    """Copy of record whose manifest shares nothing with the stored one."""
    return dataclasses.replace(record, manifest=copy.deepcopy(record.manifest))
