"""Database models."""

from .base import Base
from .carbon_model import CarbonFootprintHistoryModel
from .order_model import OrderItemModel, OrderModel
from .scheduled_order_model import (
    OrderExecutionHistoryModel,
    ScheduledOrderItemModel,
    ScheduledOrderModel,
)

__all__ = [
    "Base",
    "CarbonFootprintHistoryModel",
    "OrderExecutionHistoryModel",
    "OrderItemModel",
    "OrderModel",
    "ScheduledOrderItemModel",
    "ScheduledOrderModel",
]
