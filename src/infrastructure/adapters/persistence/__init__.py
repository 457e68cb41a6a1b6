"""PostgreSQL persistence adapters (SQLAlchemy async)."""

from src.infrastructure.adapters.persistence.schema import create_schema, metadata, updates
from src.infrastructure.adapters.persistence.update_store import PostgresUpdateStore

__all__: list[str] = ["PostgresUpdateStore", "create_schema", "metadata", "updates"]
