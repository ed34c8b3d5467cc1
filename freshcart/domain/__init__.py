"""Domain layer - pure domain models and interfaces."""

from .entities import (
    CarbonFootprintHistory,
    Order,
    OrderExecutionHistory,
    OrderLine,
    ScheduledOrder,
    ScheduledOrderLine,
)
from .repositories import (
    CarbonHistoryRepository,
    OrderRepository,
    ScheduledOrderRepository,
)
from .value_objects import Identity, Money, OrderNumber

__all__ = [
    "CarbonFootprintHistory",
    "CarbonHistoryRepository",
    "Identity",
    "Money",
    "Order",
    "OrderExecutionHistory",
    "OrderLine",
    "OrderNumber",
    "OrderRepository",
    "ScheduledOrder",
    "ScheduledOrderLine",
    "ScheduledOrderRepository",
]
