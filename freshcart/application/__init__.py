"""Application layer - services, interfaces, and DTOs."""

from .dtos import CreateOrderRequest, CreateScheduledOrderRequest, OrderDTO, ScheduledOrderDTO
from .interfaces import ICatalogClient, IEventPublisher
from .services import (
    CarbonQueryService,
    OrderLifecycleService,
    PaymentSettlementHandler,
    SalesReportService,
    ScheduledOrderService,
)

__all__ = [
    # DTOs
    "CreateOrderRequest",
    "CreateScheduledOrderRequest",
    "OrderDTO",
    "ScheduledOrderDTO",
    # Services
    "CarbonQueryService",
    "OrderLifecycleService",
    "PaymentSettlementHandler",
    "SalesReportService",
    "ScheduledOrderService",
    # Interfaces
    "ICatalogClient",
    "IEventPublisher",
]
