"""Pytest configuration and shared fixtures."""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from freshcart.application.services import (
    CarbonQueryService,
    OrderLifecycleService,
    SalesReportService,
    ScheduledOrderService,
)
from freshcart.data.models import Base
from freshcart.infrastructure.database.config import create_session_factory
from freshcart.infrastructure.locks import ScheduleLockRegistry

from tests.mocks.fake_catalog_client import FakeCatalogClient
from tests.mocks.recording_publisher import RecordingPublisher


# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Cleanup
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def test_session_factory(test_engine):
    """Create test session factory."""
    yield create_session_factory(test_engine)


@pytest.fixture
def catalog_client() -> FakeCatalogClient:
    return FakeCatalogClient()


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def schedule_locks() -> ScheduleLockRegistry:
    return ScheduleLockRegistry()


@pytest.fixture
def order_service(test_session_factory, catalog_client, publisher) -> OrderLifecycleService:
    return OrderLifecycleService(test_session_factory, catalog_client, publisher)


@pytest.fixture
def scheduled_order_service(test_session_factory, schedule_locks) -> ScheduledOrderService:
    return ScheduledOrderService(test_session_factory, locks=schedule_locks)


@pytest.fixture
def carbon_service(test_session_factory) -> CarbonQueryService:
    return CarbonQueryService(test_session_factory)


@pytest.fixture
def sales_report_service(test_session_factory) -> SalesReportService:
    return SalesReportService(test_session_factory)
