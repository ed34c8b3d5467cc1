"""
Order Domain Events.

Events raised during the order and scheduled-order lifecycles.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .base import DomainEvent


@dataclass
class OrderCreatedEvent(DomainEvent):
    """
    Order was created and persisted.

    Trigger: interactive checkout, point-of-sale register, or scheduler sweep
    """

    topic = "order.created"

    order_id: Optional[int] = None
    order_number: str = ""
    status: str = ""
    total_amount: Decimal = Decimal("0.00")
    is_pos_order: bool = False

    def __post_init__(self):
        """Set aggregate_id to order_number."""
        if not self.aggregate_id and self.order_number:
            self.aggregate_id = self.order_number
        super().__post_init__()


@dataclass
class OrderStatusChangedEvent(DomainEvent):
    """
    Order status changed.

    Tracks status transitions (PENDING -> CONFIRMED -> ... -> DELIVERED).
    """

    topic = "order.status_changed"

    order_number: str = ""
    previous_status: str = ""
    new_status: str = ""

    def __post_init__(self):
        """Set aggregate_id to order_number."""
        if not self.aggregate_id and self.order_number:
            self.aggregate_id = self.order_number
        super().__post_init__()


@dataclass
class ScheduledOrderExecutedEvent(DomainEvent):
    """A scheduled order produced a real order during a sweep."""

    topic = "scheduled_order.executed"

    scheduled_order_id: Optional[int] = None
    order_number: str = ""
    occurrence: int = 0
    schedule_status: str = ""

    def __post_init__(self):
        if not self.aggregate_id and self.scheduled_order_id is not None:
            self.aggregate_id = str(self.scheduled_order_id)
        super().__post_init__()
