"""Bootstrap wiring for the update store.

Selects the PostgreSQL store when DATABASE_URL is configured and the
in-memory stub otherwise. The choice is logged.
"""

from __future__ import annotations

import os

from structlog import get_logger

from src.application.ports.update_store import UpdateStoreProtocol
from src.infrastructure.stubs.update_store_stub import UpdateStoreStub

logger = get_logger()

_update_store: UpdateStoreProtocol | None = None


def create_update_store() -> UpdateStoreProtocol:
    """Build a store for the current environment.

    Returns PostgreSQL store if DATABASE_URL is configured, otherwise
    the in-memory stub.
    """
    if not os.environ.get("DATABASE_URL"):
        logger.warning(
            "update_store_initialized",
            store_type="InMemoryStub",
            message="DATABASE_URL not set - using in-memory store (data will not persist)",
        )
        return UpdateStoreStub()

    try:
        from src.bootstrap.database import get_session_factory
        from src.infrastructure.adapters.persistence.update_store import (
            PostgresUpdateStore,
        )

        store = PostgresUpdateStore(session_factory=get_session_factory())
    except Exception as e:
        logger.error(
            "postgres_update_store_init_failed",
            error=str(e),
            message="Falling back to in-memory store",
        )
        return UpdateStoreStub()

    logger.info(
        "update_store_initialized",
        store_type="PostgreSQL",
        message="Using PostgreSQL store for update persistence",
    )
    return store


def get_update_store() -> UpdateStoreProtocol:
    """Get the process-wide update store."""
    global _update_store
    if _update_store is None:
        _update_store = create_update_store()
    return _update_store


def set_update_store(store: UpdateStoreProtocol) -> None:
    """Set custom update store (testing/override)."""
    global _update_store
    _update_store = store


def reset_update_store() -> None:
    """Reset store singleton (testing cleanup)."""
    global _update_store
    _update_store = None
