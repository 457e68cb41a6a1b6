"""
Integration test configuration with testcontainers.

Provides a session-scoped PostgreSQL 16 container and a per-test update
store bound to a freshly truncated ``updates`` table.

Usage:
    @pytest.mark.integration
    async def test_example(postgres_update_store: PostgresUpdateStore) -> None:
        ...

Note: Docker must be running for these fixtures to work; otherwise the
tests that use them are skipped.
"""

from collections.abc import AsyncGenerator, Generator

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from testcontainers.postgres import PostgresContainer

from src.infrastructure.adapters.persistence.schema import create_schema
from src.infrastructure.adapters.persistence.update_store import PostgresUpdateStore


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """Session-scoped PostgreSQL 16 container.

    Started once and reused across all integration tests.
    """
    container = PostgresContainer("postgres:16-alpine")
    try:
        container.start()
    except Exception as exc:  # Docker missing or not running
        pytest.skip(f"PostgreSQL container unavailable: {exc}")
    try:
        yield container
    finally:
        container.stop()


@pytest.fixture(scope="session")
def postgres_async_url(postgres_container: PostgresContainer) -> str:
    """Get async-compatible PostgreSQL connection URL.

    testcontainers returns a psycopg2 URL by default, we convert to asyncpg.
    """
    sync_url = postgres_container.get_connection_url()
    async_url: str = sync_url.replace(
        "postgresql+psycopg2://", "postgresql+asyncpg://"
    ).replace("postgresql://", "postgresql+asyncpg://")
    return async_url


@pytest.fixture
async def db_engine(postgres_async_url: str) -> AsyncGenerator[AsyncEngine, None]:
    """Per-test engine with the schema created and the table emptied."""
    engine = create_async_engine(postgres_async_url, echo=False)
    await create_schema(engine)
    async with engine.begin() as conn:
        await conn.execute(text("TRUNCATE TABLE updates RESTART IDENTITY"))
    yield engine
    await engine.dispose()


@pytest.fixture
def postgres_update_store(db_engine: AsyncEngine) -> PostgresUpdateStore:
    """Update store bound to the test database."""
    session_factory = async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return PostgresUpdateStore(session_factory=session_factory)
