"""
Pytest configuration and fixtures for ganttlink tests.
"""

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from ganttlink.main import app
from ganttlink.models import ResolveOptions
from ganttlink.store import TaskStore


@pytest.fixture
def options():
    """Engine options independent of environment settings."""
    return ResolveOptions(pixels_per_time_unit=1, max_depth=10)


@pytest.fixture
def make_store():
    """Build a TaskStore from task bars."""
    def _make(*tasks):
        return TaskStore(tasks)
    return _make


@pytest_asyncio.fixture(scope="function")
async def client():
    """Create an async test client for the API."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
