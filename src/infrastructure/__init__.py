"""
Infrastructure layer - External adapters for the update service.

This layer contains:
- PostgreSQL update store (SQLAlchemy async)
- In-process notification bus
- Shared-secret authorizer
- Prometheus metrics and structlog configuration

IMPORT RULES:
- CAN import from: domain, application
- Implements ports defined in application layer
"""

__all__: list[str] = []
