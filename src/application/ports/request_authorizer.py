"""Request authorizer port.

Write requests carry an Authorization value that must match a pre-shared
internal secret. The check is a pluggable capability consulted by the API
layer before any core logic runs; the store and bus never see credentials.
"""

from __future__ import annotations

from typing import Protocol


class RequestAuthorizerProtocol(Protocol):
    """Protocol for deciding whether a request may reach the core."""

    def is_authorized(self, authorization: str | None) -> bool:
        """Check an Authorization header value.

        Args:
            authorization: Raw header value, or None if absent.

        Returns:
            True if the request may proceed.
        """
        ...
