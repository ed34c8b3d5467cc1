"""Domain events published on the event bus."""
from .base import DomainEvent
from .order_events import (
    OrderCreatedEvent,
    OrderStatusChangedEvent,
    ScheduledOrderExecutedEvent,
)

__all__ = [
    "DomainEvent",
    "OrderCreatedEvent",
    "OrderStatusChangedEvent",
    "ScheduledOrderExecutedEvent",
]
