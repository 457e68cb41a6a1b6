"""
API layer - FastAPI routes and HTTP concerns for the update service.

This layer contains:
- FastAPI route definitions
- Request/Response DTOs
- HTTP middleware
- Authorization dependencies

IMPORT RULES:
- CAN import from: application
- Uses dependency injection for infrastructure adapters
"""

__all__: list[str] = []
