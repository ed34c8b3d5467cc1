"""Pytest configuration and fixtures for integration tests."""

from typing import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from apps.api import deps
from apps.api.main import app


@pytest_asyncio.fixture
async def api_client(
    test_session_factory, catalog_client, publisher, schedule_locks
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app with test dependencies."""
    app.dependency_overrides[deps.get_session_factory] = lambda: test_session_factory
    app.dependency_overrides[deps.get_catalog_client] = lambda: catalog_client
    app.dependency_overrides[deps.get_event_publisher] = lambda: publisher
    app.dependency_overrides[deps.get_schedule_locks] = lambda: schedule_locks

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    # Clean up overrides
    app.dependency_overrides.clear()
