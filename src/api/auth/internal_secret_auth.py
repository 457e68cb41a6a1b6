"""Internal shared-secret authorization for update write routes.

Create and patch requests are checked by the configured
RequestAuthorizerProtocol before any core logic runs. The event stream is
read-only and does not use this dependency.
"""

from typing import Annotated

import structlog
from fastapi import Depends, Header, HTTPException, Request, status

from src.api.dependencies.update import get_request_authorizer
from src.application.ports.request_authorizer import RequestAuthorizerProtocol

logger = structlog.get_logger(__name__)


def require_internal_secret(
    request: Request,
    authorizer: Annotated[RequestAuthorizerProtocol, Depends(get_request_authorizer)],
    authorization: Annotated[
        str | None,
        Header(description="Pre-shared internal API secret."),
    ] = None,
) -> None:
    """Reject write requests that do not carry the internal secret.

    Raises:
        HTTPException 401: If the Authorization header is missing or wrong.
    """
    if authorizer.is_authorized(authorization):
        return

    logger.warning(
        "auth_failed",
        component="internal_secret_auth",
        reason="missing_authorization" if not authorization else "invalid_secret",
        method=request.method,
        path=request.url.path,
    )
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={
            "type": "urn:updates:error:unauthorized",
            "title": "Unauthorized",
            "status": 401,
            "detail": "A valid internal API secret is required",
            "instance": str(request.url.path),
        },
    )
