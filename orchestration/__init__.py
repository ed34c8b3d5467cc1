"""Orchestration layer - in-process event bus and the scheduled-order sweep."""

from .bus import EventBusProtocol, FanOutEventPublisher, InMemoryEventBus
from .events import Event, EventMetadata
from .scheduler import ScheduledOrderScheduler, SweepResult

__all__ = [
    "Event",
    "EventBusProtocol",
    "EventMetadata",
    "FanOutEventPublisher",
    "InMemoryEventBus",
    "ScheduledOrderScheduler",
    "SweepResult",
]
