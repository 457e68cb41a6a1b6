"""Update record domain model.

An update is a deployment/release manifest tagged by the commit it was built
from. The commit is the idempotency key: at most one record ever exists per
commit, and its id and manifest never change after creation. Only the release
``channel`` and the ``tainted`` flag may be changed afterwards, via a patch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def _utc_now() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


class UpdateEventType(str, Enum):
    """Kind of event published on the update notification channel."""

    CREATED = "created"
    PATCHED = "patched"


@dataclass(frozen=True)
class UpdatePatch:
    """Restricted set of mutable update fields.

    ``None`` means "leave unchanged".

    Attributes:
        channel: Release channel to assign.
        tainted: Whether the update is tainted.
    """

    channel: str | None = None
    tainted: bool | None = None

    def is_empty(self) -> bool:
        """Return True when the patch changes nothing."""
        return self.channel is None and self.tainted is None

    def changed_fields(self) -> list[str]:
        """Names of the fields this patch sets."""
        return [name for name in ("channel", "tainted") if getattr(self, name) is not None]


@dataclass(frozen=True)
class UpdateRecord:
    """An accepted update.

    Attributes:
        id: Positive, strictly increasing id assigned at creation.
        commit: Unique commit identifier (idempotency key).
        manifest: Opaque manifest document supplied at creation.
        channel: Release channel, unset until patched.
        tainted: Taint flag, False until patched.
        created_at: Creation timestamp (UTC).
        updated_at: Last patch timestamp (UTC), equal to created_at until patched.
    """

    id: int
    commit: str
    manifest: Any
    channel: str | None = field(default=None)
    tainted: bool = field(default=False)
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        """Validate update record fields."""
        if self.id < 1:
            raise ValueError(f"Update id must be positive, got {self.id}")
        if not self.commit:
            raise ValueError("Update commit must be a non-empty string")

    def with_patch(self, patch: UpdatePatch) -> UpdateRecord:
        """Create new record with the patch applied.

        Since UpdateRecord is frozen, returns new instance. ``id``, ``commit``,
        ``manifest`` and ``created_at`` are carried over unchanged.

        Args:
            patch: Fields to change.

        Returns:
            New UpdateRecord with patched fields and a fresh updated_at.
        """
        return UpdateRecord(
            id=self.id,
            commit=self.commit,
            manifest=self.manifest,
            channel=patch.channel if patch.channel is not None else self.channel,
            tainted=patch.tainted if patch.tainted is not None else self.tainted,
            created_at=self.created_at,
            updated_at=_utc_now(),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "id": self.id,
            "commit": self.commit,
            "manifest": self.manifest,
            "channel": self.channel,
            "tainted": self.tainted,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass(frozen=True)
class UpdateEvent:
    """An event announcing a change to an update.

    Attributes:
        event_type: What happened to the record.
        record: The full record after the change.
        published_at: When the event was created (UTC).
    """

    event_type: UpdateEventType
    record: UpdateRecord
    published_at: datetime = field(default_factory=_utc_now)

    @classmethod
    def created(cls, record: UpdateRecord) -> UpdateEvent:
        """Build the event announcing a newly created record."""
        return cls(event_type=UpdateEventType.CREATED, record=record)

    @classmethod
    def patched(cls, record: UpdateRecord) -> UpdateEvent:
        """Build the event announcing a patched record."""
        return cls(event_type=UpdateEventType.PATCHED, record=record)
