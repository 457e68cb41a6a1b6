"""Update API request/response models.

Request models are deliberately loose: ``commit`` and ``manifest`` accept
any JSON value so that missing or malformed input reaches the ingestion
service and is reported as a 400 with a problem detail body.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.domain.models.update_record import UpdateRecord


class CreateUpdateRequest(BaseModel):
    """Request body for creating an update.

    Attributes:
        commit: Commit identifier (idempotency key).
        manifest: Opaque manifest document.
    """

    model_config = ConfigDict(extra="ignore")

    commit: Any = Field(default=None, description="Commit identifier")
    manifest: Any = Field(default=None, description="Release manifest document")


class CreateUpdateResponse(BaseModel):
    """Response for a created update."""

    id: int = Field(..., description="Identifier assigned to the new update")


class PatchUpdateRequest(BaseModel):
    """Request body for patching an update.

    Unknown fields are kept so the patch policy can ignore or reject them.

    Attributes:
        commit: Commit of the update to patch.
        channel: Release channel to assign.
        tainted: Taint flag to assign.
    """

    model_config = ConfigDict(extra="allow")

    commit: Any = Field(default=None, description="Commit of the update to patch")
    channel: Any = Field(default=None, description="Release channel")
    tainted: Any = Field(default=None, description="Whether the update is tainted")

    def patch_fields(self) -> dict[str, Any]:
        """Requested changes, excluding the commit key."""
        fields: dict[str, Any] = dict(self.model_extra or {})
        fields["channel"] = self.channel
        fields["tainted"] = self.tainted
        return fields


class UpdateRecordResponse(BaseModel):
    """Full update record."""

    id: int
    commit: str
    manifest: Any
    channel: str | None = None
    tainted: bool = False
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: UpdateRecord) -> "UpdateRecordResponse":
        return cls(
            id=record.id,
            commit=record.commit,
            manifest=record.manifest,
            channel=record.channel,
            tainted=record.tainted,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class UpdateErrorResponse(BaseModel):
    """Error response for update operations (RFC 7807).

    Attributes:
        type: Error type URI.
        title: Human-readable error title.
        status: HTTP status code.
        detail: Detailed error message.
        instance: Request path that caused the error.
    """

    type: str = Field(..., description="Error type URI")
    title: str = Field(..., description="Human-readable error title")
    status: int = Field(..., description="HTTP status code")
    detail: str = Field(..., description="Detailed error message")
    instance: str = Field(..., description="Request path that caused the error")
