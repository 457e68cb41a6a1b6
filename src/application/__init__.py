"""
Application layer - Use cases and orchestration for the update service.

This layer contains:
- Application services (ingestion gateway, patch handler)
- Port definitions (abstract interfaces for infrastructure)

IMPORT RULES:
- CAN import from: domain
- Infrastructure types appear only under TYPE_CHECKING
"""

__all__: list[str] = []
