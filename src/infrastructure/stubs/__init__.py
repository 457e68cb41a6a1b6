"""Infrastructure stubs for development and testing.

Available stubs:
- UpdateStoreStub: In-memory update store with the same idempotency
  guarantee as the PostgreSQL store, plus failure injection

WARNING: These stubs are NOT for durable production use.
Production implementations are in src/infrastructure/adapters/.
"""

from src.infrastructure.stubs.update_store_stub import UpdateStoreStub

__all__: list[str] = ["UpdateStoreStub"]
