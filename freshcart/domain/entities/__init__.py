"""Domain entities."""

from .carbon_footprint import CarbonFootprintHistory
from .order import Order, OrderLine
from .scheduled_order import OrderExecutionHistory, ScheduledOrder, ScheduledOrderLine

__all__ = [
    "CarbonFootprintHistory",
    "Order",
    "OrderExecutionHistory",
    "OrderLine",
    "ScheduledOrder",
    "ScheduledOrderLine",
]
