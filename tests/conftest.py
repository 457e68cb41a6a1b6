"""
Pytest configuration and shared fixtures for update service tests.

Testing Standards:
- Async tests run in auto mode (asyncio_mode = "auto" in pyproject.toml)
- Use the in-memory UpdateStoreStub for unit tests
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/ and are marked ``integration``
"""

import pytest


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from src import __version__

    return __version__
