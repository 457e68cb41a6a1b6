"""Security adapters for request authorization."""

from src.infrastructure.adapters.security.shared_secret_authorizer import (
    SharedSecretAuthorizer,
)

__all__ = ["SharedSecretAuthorizer"]
