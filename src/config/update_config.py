"""Update service configuration.

This module defines the per-deployment (and per-test-scenario) configuration
for update ingestion, with environment variable overrides.

Environment Variables:
- UPDATE_DUPLICATE_STATUS_CODE: Status for a duplicate commit, 304 or 409 (default: 304)
- UPDATE_NOTIFY_ON_PATCH: Publish a "patched" event after a patch (default: false)
- UPDATE_PATCH_FIELD_POLICY: "ignore" or "reject" non-patchable fields (default: ignore)
- INTERNAL_API_SECRET: Pre-shared secret expected in the Authorization header
- UPDATE_SUBSCRIBER_QUEUE_SIZE: Pending events buffered per subscriber (default: 100)
- UPDATE_STREAM_KEEPALIVE_SECONDS: Idle interval before an SSE keepalive (default: 30.0)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum

ALLOWED_DUPLICATE_STATUS_CODES = frozenset({304, 409})

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed integer value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(key: str, default: float) -> float:
    """Get float environment variable with default."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_bool_env(key: str, default: bool) -> bool:
    """Get boolean environment variable with default."""
    value = os.environ.get(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    return default


class PatchFieldPolicy(str, Enum):
    """How a patch treats fields other than ``channel`` and ``tainted``.

    IGNORE: Drop them (logged) and apply the allowed fields.
    REJECT: Fail the whole patch as an invalid request.
    """

    IGNORE = "ignore"
    REJECT = "reject"


@dataclass(frozen=True)
class UpdateServiceConfig:
    """Configuration for update ingestion and notification.

    Passed explicitly into the ingestion service so each deployment or test
    scenario can choose its own behaviour.

    Attributes:
        duplicate_status_code: HTTP status returned for a duplicate commit.
        notify_on_patch: Whether a successful patch publishes a "patched" event.
        patch_field_policy: Treatment of non-patchable fields in a patch.
        internal_api_secret: Expected Authorization value. None disables the check.
        subscriber_queue_size: Events buffered per subscriber before dropping.
        stream_keepalive_seconds: Idle seconds before an SSE keepalive comment.
    """

    duplicate_status_code: int = 304
    notify_on_patch: bool = False
    patch_field_policy: PatchFieldPolicy = PatchFieldPolicy.IGNORE
    internal_api_secret: str | None = None
    subscriber_queue_size: int = 100
    stream_keepalive_seconds: float = 30.0

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.duplicate_status_code not in ALLOWED_DUPLICATE_STATUS_CODES:
            raise ValueError(
                "duplicate_status_code must be one of "
                f"{sorted(ALLOWED_DUPLICATE_STATUS_CODES)}, got {self.duplicate_status_code}"
            )
        if self.subscriber_queue_size < 1:
            raise ValueError(
                f"subscriber_queue_size must be positive, got {self.subscriber_queue_size}"
            )
        if self.stream_keepalive_seconds <= 0:
            raise ValueError(
                "stream_keepalive_seconds must be positive, "
                f"got {self.stream_keepalive_seconds}"
            )

    @property
    def requires_authorization(self) -> bool:
        """Whether write requests must carry the internal secret."""
        return bool(self.internal_api_secret)

    @classmethod
    def from_environment(cls) -> UpdateServiceConfig:
        """Create config from environment variables with defaults.

        Raises:
            ValueError: If a value is outside its allowed range.
        """
        policy_value = os.environ.get("UPDATE_PATCH_FIELD_POLICY", "ignore").strip().lower()
        try:
            policy = PatchFieldPolicy(policy_value)
        except ValueError:
            policy = PatchFieldPolicy.IGNORE

        return cls(
            duplicate_status_code=_get_int_env("UPDATE_DUPLICATE_STATUS_CODE", 304),
            notify_on_patch=_get_bool_env("UPDATE_NOTIFY_ON_PATCH", False),
            patch_field_policy=policy,
            internal_api_secret=os.environ.get("INTERNAL_API_SECRET") or None,
            subscriber_queue_size=_get_int_env("UPDATE_SUBSCRIBER_QUEUE_SIZE", 100),
            stream_keepalive_seconds=_get_float_env(
                "UPDATE_STREAM_KEEPALIVE_SECONDS", 30.0
            ),
        )


# Default config (no secret, 304 for duplicates, patch never notifies)
DEFAULT_UPDATE_SERVICE_CONFIG = UpdateServiceConfig()
