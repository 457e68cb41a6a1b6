"""Update ingestion service.

Orchestrates the create and patch paths over the update store and the
notification bus.

Create flow:
1. Validate commit and manifest
2. store.create_if_absent() decides created vs. duplicate atomically
3. Created: publish a "created" event carrying the full record, then return
4. Duplicate: raise DuplicateCommitError, publish nothing

The store commit happens-before the publish, and the publish happens-before
the result is returned, so a subscriber connected before the request always
sees the event before the client sees the response.

Developer Golden Rules:
1. NEVER PUBLISH BEFORE PERSISTING - a failed store call publishes nothing
2. NEVER PUBLISH DUPLICATES - exactly one "created" event per commit
3. NO RETRIES - storage errors surface to the caller unchanged
4. NOTIFICATION IS BEST-EFFORT - a bus failure is logged and counted, never
   raised to the caller
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from src.application.ports.notification_bus import NotificationBusPort
from src.application.ports.update_store import UpdateStoreProtocol
from src.application.services.base import LoggingMixin
from src.application.services.update_patch_service import UpdatePatchService
from src.config.update_config import DEFAULT_UPDATE_SERVICE_CONFIG, UpdateServiceConfig
from src.domain.errors.update import (
    DuplicateCommitError,
    InvalidUpdateRequestError,
    UpdateNotFoundError,
    UpdateStorageError,
)
from src.domain.models.update_record import UpdateEvent, UpdateRecord

if TYPE_CHECKING:
    from src.infrastructure.monitoring.metrics import MetricsCollector


@dataclass(frozen=True)
class CreateUpdateResult:
    """Outcome of a successful create.

    Attributes:
        record: The newly stored record.
        subscribers_notified: Subscribers the "created" event was buffered for.
    """

    record: UpdateRecord
    subscribers_notified: int = 0

    @property
    def update_id(self) -> int:
        return self.record.id


class UpdateIngestionService(LoggingMixin):
    """Gateway for update creation, patching and lookup.

    Attributes:
        _store: Update store (owns idempotency and id assignment).
        _bus: Notification bus for live subscribers.
        _config: Per-deployment behaviour.
        _patch_service: Restricted-field patch handler.
        _metrics: Optional Prometheus collector.
    """

    def __init__(
        self,
        store: UpdateStoreProtocol,
        bus: NotificationBusPort,
        config: UpdateServiceConfig = DEFAULT_UPDATE_SERVICE_CONFIG,
        patch_service: UpdatePatchService | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._store = store
        self._bus = bus
        self._config = config
        self._patch_service = patch_service or UpdatePatchService(
            store, policy=config.patch_field_policy
        )
        self._metrics = metrics
        self._init_logger(component="updates")

    @property
    def config(self) -> UpdateServiceConfig:
        return self._config

    async def create_update(self, commit: Any, manifest: Any) -> CreateUpdateResult:
        """Create an update unless its commit is already recorded.

        Args:
            commit: Commit identifier (must be a non-empty string).
            manifest: Opaque manifest document (must not be None).

        Returns:
            CreateUpdateResult for the new record.

        Raises:
            InvalidUpdateRequestError: If commit or manifest is missing.
            DuplicateCommitError: If the commit already has a record.
            UpdateStorageError: If the store fails.
        """
        log = self._log_operation("create_update", commit=commit)

        try:
            self._validate_create(commit, manifest)
        except InvalidUpdateRequestError as exc:
            log.info("update_creation_rejected", reason=str(exc), field=exc.field)
            self._count_creation("invalid")
            raise

        try:
            record, was_created = await self._store.create_if_absent(commit, manifest)
        except UpdateStorageError:
            log.error("update_creation_failed")
            self._count_creation("error")
            raise

        if not was_created:
            log.info("update_duplicate_rejected", existing_id=record.id)
            self._count_creation("duplicate")
            raise DuplicateCommitError(commit, record.id)

        notified = await self._publish(UpdateEvent.created(record))
        self._count_creation("created")
        log.info("update_created", update_id=record.id, subscribers=notified)
        return CreateUpdateResult(record=record, subscribers_notified=notified)

    async def patch_update(self, commit: Any, fields: Mapping[str, Any]) -> UpdateRecord:
        """Patch channel/tainted on an existing update.

        Args:
            commit: Commit of the update to patch.
            fields: Requested changes, excluding commit.

        Returns:
            The record after the patch.

        Raises:
            InvalidUpdateRequestError: If commit is missing or fields are bad.
            UpdateNotFoundError: If no update holds the commit.
            UpdateStorageError: If the store fails.
        """
        log = self._log_operation("patch_update", commit=commit)

        try:
            if not isinstance(commit, str) or not commit:
                raise InvalidUpdateRequestError("commit is required", field="commit")
            record = await self._patch_service.apply(commit, fields)
        except InvalidUpdateRequestError as exc:
            log.info("update_patch_rejected", reason=str(exc), field=exc.field)
            self._count_patch("invalid")
            raise
        except UpdateNotFoundError:
            log.info("update_patch_not_found")
            self._count_patch("not_found")
            raise
        except UpdateStorageError:
            log.error("update_patch_failed")
            self._count_patch("error")
            raise

        self._count_patch("patched")
        if self._config.notify_on_patch:
            await self._publish(UpdateEvent.patched(record))
        return record

    async def get_update(self, commit: str) -> UpdateRecord:
        """Look up an update by commit.

        Raises:
            UpdateNotFoundError: If no update holds the commit.
        """
        record = await self._store.find_by_commit(commit)
        if record is None:
            raise UpdateNotFoundError(commit)
        return record

    def _validate_create(self, commit: Any, manifest: Any) -> None:
        if commit is None:
            raise InvalidUpdateRequestError("commit is required", field="commit")
        if not isinstance(commit, str) or not commit.strip():
            raise InvalidUpdateRequestError(
                "commit must be a non-empty string", field="commit"
            )
        if manifest is None:
            raise InvalidUpdateRequestError("manifest is required", field="manifest")

    async def _publish(self, event: UpdateEvent) -> int:
        # The record is already committed; a bus failure must not fail the request
        try:
            notified = await self._bus.publish(event)
        except Exception as exc:
            self._log.error(
                "update_event_publish_failed",
                event_type=event.event_type.value,
                update_id=event.record.id,
                commit=event.record.commit,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            if self._metrics is not None:
                self._metrics.increment_event_publish_failures(event.event_type.value)
            return 0

        if self._metrics is not None:
            self._metrics.increment_events_published(event.event_type.value)
        return notified

    def _count_creation(self, outcome: str) -> None:
        if self._metrics is not None:
            self._metrics.increment_update_creations(outcome)

    def _count_patch(self, outcome: str) -> None:
        if self._metrics is not None:
            self._metrics.increment_update_patches(outcome)
