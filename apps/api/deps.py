"""FastAPI dependencies for dependency injection."""

from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from freshcart.application.interfaces import ICatalogClient, IEventPublisher
from freshcart.application.services import (
    CarbonQueryService,
    OrderLifecycleService,
    SalesReportService,
    ScheduledOrderService,
)
from freshcart.domain.services.carbon import CarbonFootprintEstimator
from freshcart.domain.services.carbon_summary import CarbonSummaryAggregator
from freshcart.infrastructure.adapters.catalog import HttpCatalogClient
from freshcart.infrastructure.bus import RedisStreamPublisher
from freshcart.infrastructure.database.config import create_session_factory, get_engine
from freshcart.infrastructure.locks import ScheduleLockRegistry
from freshcart.settings import get_app_settings
from orchestration.bus import FanOutEventPublisher, InMemoryEventBus
from orchestration.scheduler import ScheduledOrderScheduler

# Load .env exactly once, before any settings object is created
_PROJECT_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=_PROJECT_ROOT / ".env")

# =============================================================================
# SINGLETONS (created lazily, shared by requests and background workers)
# =============================================================================

_session_factory: Optional[async_sessionmaker[AsyncSession]] = None
_event_bus: Optional[InMemoryEventBus] = None
_event_publisher: Optional[IEventPublisher] = None
_stream_publisher: Optional[RedisStreamPublisher] = None
_catalog_client: Optional[ICatalogClient] = None
_schedule_locks: Optional[ScheduleLockRegistry] = None


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get SQLAlchemy session factory.

    Returns:
        async_sessionmaker instance
    """
    global _session_factory
    if _session_factory is None:
        _session_factory = create_session_factory(get_engine())
    return _session_factory


def get_event_bus() -> InMemoryEventBus:
    """Get the in-process event bus."""
    global _event_bus
    if _event_bus is None:
        _event_bus = InMemoryEventBus()
    return _event_bus


def get_event_publisher() -> IEventPublisher:
    """Get the publisher used by services.

    Events always reach the in-process bus; with ``REDIS_URL`` set they are
    also appended to the orders stream.
    """
    global _event_publisher, _stream_publisher
    if _event_publisher is None:
        integrations = get_app_settings().integrations
        bus = get_event_bus()
        if integrations.redis_url:
            _stream_publisher = RedisStreamPublisher(
                redis_url=integrations.redis_url,
                stream_name=integrations.orders_stream,
            )
            _event_publisher = FanOutEventPublisher([bus, _stream_publisher])
        else:
            _event_publisher = bus
    return _event_publisher


async def close_event_publisher() -> None:
    """Close the orders stream connection, if one was opened."""
    if _stream_publisher is not None:
        await _stream_publisher.disconnect()


def get_catalog_client() -> ICatalogClient:
    """Get the catalog stock client."""
    global _catalog_client
    if _catalog_client is None:
        _catalog_client = HttpCatalogClient(get_app_settings().integrations)
    return _catalog_client


def get_schedule_locks() -> ScheduleLockRegistry:
    """Get the lock registry shared by the API and the scheduler."""
    global _schedule_locks
    if _schedule_locks is None:
        _schedule_locks = ScheduleLockRegistry()
    return _schedule_locks


# =============================================================================
# SERVICES
# =============================================================================

def build_estimator() -> CarbonFootprintEstimator:
    return CarbonFootprintEstimator(get_app_settings().carbon.build_emission_config())


def get_order_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    catalog_client: ICatalogClient = Depends(get_catalog_client),
    event_publisher: IEventPublisher = Depends(get_event_publisher),
) -> OrderLifecycleService:
    """Get OrderLifecycleService instance.

    Returns:
        OrderLifecycleService instance
    """
    return OrderLifecycleService(
        session_factory,
        catalog_client,
        event_publisher,
        pricing=get_app_settings().pricing.build_calculator(),
        estimator=build_estimator(),
    )


def get_scheduled_order_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    locks: ScheduleLockRegistry = Depends(get_schedule_locks),
) -> ScheduledOrderService:
    """Get ScheduledOrderService instance.

    Returns:
        ScheduledOrderService instance
    """
    return ScheduledOrderService(
        session_factory,
        pricing=get_app_settings().pricing.build_calculator(),
        locks=locks,
    )


def get_carbon_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
) -> CarbonQueryService:
    return CarbonQueryService(
        session_factory,
        estimator=build_estimator(),
        aggregator=CarbonSummaryAggregator(get_app_settings().carbon.baseline_per_order_kg),
    )


def get_sales_report_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
) -> SalesReportService:
    return SalesReportService(session_factory)


def build_scheduler(order_service: OrderLifecycleService) -> ScheduledOrderScheduler:
    """Scheduler wired to the shared singletons."""
    scheduler_settings = get_app_settings().scheduler
    return ScheduledOrderScheduler(
        get_session_factory(),
        order_service,
        locks=get_schedule_locks(),
        event_publisher=get_event_publisher(),
        interval_seconds=scheduler_settings.interval_seconds,
        claim_ttl_seconds=scheduler_settings.claim_ttl_seconds,
    )
