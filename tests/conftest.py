"""
Pytest configuration and fixtures for electric-client tests.

All tests run against mocked httpx clients; no server is required.
"""

from collections.abc import Generator

import pytest
from structlog.testing import capture_logs


@pytest.fixture
def anyio_backend() -> str:
    """Run async tests on asyncio only."""
    return "asyncio"


@pytest.fixture
def log_events() -> Generator[list[dict], None, None]:
    """Capture structlog events emitted during a test."""
    with capture_logs() as captured:
        yield captured
