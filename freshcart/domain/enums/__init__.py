"""Domain enums."""

from .order_status import OrderStatus, PackagingType, PaymentMethod
from .scheduled_order_status import (
    ExecutionOutcome,
    OrderType,
    RecurrenceType,
    ScheduledOrderStatus,
)

__all__ = [
    "ExecutionOutcome",
    "OrderStatus",
    "OrderType",
    "PackagingType",
    "PaymentMethod",
    "RecurrenceType",
    "ScheduledOrderStatus",
]
