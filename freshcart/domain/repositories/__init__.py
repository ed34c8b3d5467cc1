"""Repository interfaces."""

from .carbon_history_repository import CarbonHistoryRepository
from .order_repository import OrderRepository
from .scheduled_order_repository import ScheduledOrderRepository

__all__ = [
    "CarbonHistoryRepository",
    "OrderRepository",
    "ScheduledOrderRepository",
]
