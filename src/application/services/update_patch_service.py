"""Update patch handler.

Thin adapter over UpdateStoreProtocol.update_by_commit() that restricts
mutation to the release ``channel`` and the ``tainted`` flag. ``commit`` is
the lookup key and never mutable; ``manifest``, ``id`` and unknown fields are
dropped or rejected according to the configured PatchFieldPolicy.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from src.application.ports.update_store import UpdateStoreProtocol
from src.application.services.base import LoggingMixin
from src.config.update_config import PatchFieldPolicy
from src.domain.errors.update import InvalidUpdateRequestError
from src.domain.models.update_record import UpdatePatch, UpdateRecord

PATCHABLE_FIELDS = frozenset({"channel", "tainted"})


class UpdatePatchService(LoggingMixin):
    """Applies restricted-field patches to existing updates.

    Attributes:
        _store: Update store.
        _policy: Treatment of non-patchable fields.
    """

    def __init__(
        self,
        store: UpdateStoreProtocol,
        policy: PatchFieldPolicy = PatchFieldPolicy.IGNORE,
    ) -> None:
        self._store = store
        self._policy = policy
        self._init_logger(component="updates")

    def build_patch(self, fields: Mapping[str, Any]) -> UpdatePatch:
        """Turn raw request fields into a validated UpdatePatch.

        ``None`` values count as "not provided".

        Args:
            fields: Requested changes, excluding the commit key.

        Returns:
            The patch to apply.

        Raises:
            InvalidUpdateRequestError: On wrong types, or on non-patchable
                fields when the policy is REJECT.
        """
        disallowed = sorted(name for name in fields if name not in PATCHABLE_FIELDS)
        if disallowed:
            if self._policy == PatchFieldPolicy.REJECT:
                raise InvalidUpdateRequestError(
                    f"Fields cannot be patched: {', '.join(disallowed)}",
                    field=disallowed[0],
                )
            self._log.info("patch_fields_ignored", fields=disallowed)

        channel = fields.get("channel")
        if channel is not None and not isinstance(channel, str):
            raise InvalidUpdateRequestError("channel must be a string", field="channel")

        tainted = fields.get("tainted")
        if tainted is not None and not isinstance(tainted, bool):
            raise InvalidUpdateRequestError("tainted must be a boolean", field="tainted")

        return UpdatePatch(channel=channel, tainted=tainted)

    async def apply(self, commit: str, fields: Mapping[str, Any]) -> UpdateRecord:
        """Patch the update holding ``commit``.

        Raises:
            InvalidUpdateRequestError: If the fields are not acceptable.
            UpdateNotFoundError: If no update holds the commit.
            UpdateStorageError: If the store fails.
        """
        patch = self.build_patch(fields)
        log = self._log_operation(
            "apply_patch", commit=commit, fields=patch.changed_fields()
        )

        record = await self._store.update_by_commit(commit, patch)
        log.info("update_patched", update_id=record.id)
        return record
