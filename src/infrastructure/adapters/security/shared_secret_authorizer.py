"""Pre-shared internal secret authorizer.

Write requests must carry the internal API secret as the raw
``Authorization`` header value. Comparison is constant-time.
"""

from __future__ import annotations

import hmac

import structlog

from src.application.ports.request_authorizer import RequestAuthorizerProtocol

logger = structlog.get_logger()


class SharedSecretAuthorizer(RequestAuthorizerProtocol):
    """Accepts requests whose Authorization header equals the secret.

    With no secret configured every request is accepted, and a warning is
    logged once at construction.
    """

    def __init__(self, secret: str | None) -> None:
        self._secret = secret or None
        if self._secret is None:
            logger.warning(
                "internal_api_secret_not_configured",
                component="shared_secret_authorizer",
                message="INTERNAL_API_SECRET not set - write routes are unauthenticated",
            )

    @property
    def enforcing(self) -> bool:
        """Whether a secret is being checked."""
        return self._secret is not None

    def is_authorized(self, authorization: str | None) -> bool:
        if self._secret is None:
            return True
        if not authorization:
            return False
        return hmac.compare_digest(
            authorization.encode("utf-8"), self._secret.encode("utf-8")
        )
