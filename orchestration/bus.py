"""Event bus - EventBusProtocol, InMemoryEventBus and FanOutEventPublisher."""

from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Protocol

from freshcart.application.interfaces import IEventPublisher
from freshcart.infrastructure.logging import get_logger

from .events import Event, EventMetadata

EventHandler = Callable[[Event], Awaitable[None]]


class EventBusProtocol(Protocol):
    """Protocol for event bus implementations."""

    async def dispatch(self, event: Event) -> None:
        """Deliver an event to the handlers of its topic.

        Args:
            event: Event to deliver
        """
        ...

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        """Subscribe a handler to a topic.

        Args:
            event_name: Topic to subscribe to
            handler: Async handler function
        """
        ...


class InMemoryEventBus(IEventPublisher, EventBusProtocol):
    """In-process topic bus; handler failures are logged and never propagate."""

    def __init__(self, source: str = "freshcart") -> None:
        """Initialize in-memory event bus.

        Args:
            source: Value stamped into the metadata of published events
        """
        self._handlers: dict[str, list[EventHandler]] = {}
        self._source = source
        self._logger = get_logger("orchestration.event_bus")

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        """Subscribe a handler to a topic.

        Args:
            event_name: Topic to subscribe to
            handler: Async handler function
        """
        if event_name not in self._handlers:
            self._handlers[event_name] = []
        self._handlers[event_name].append(handler)

    def handler_count(self, event_name: str) -> int:
        return len(self._handlers.get(event_name, []))

    async def publish(self, topic: str, payload: dict[str, Any]) -> None:
        """Wrap a payload into an Event and dispatch it.

        Args:
            topic: Topic name
            payload: Message body
        """
        await self.dispatch(Event(name=topic, payload=payload, metadata=EventMetadata(source=self._source)))

    async def dispatch(self, event: Event) -> None:
        """Deliver an event to all handlers subscribed to its topic.

        Args:
            event: Event to deliver
        """
        handlers = self._handlers.get(event.name, [])
        if not handlers:
            return

        self._logger.info(
            f"Publishing event {event.name} (id={event.metadata.event_id}, "
            f"handlers={len(handlers)})"
        )

        for handler in handlers:
            try:
                await handler(event)
            except Exception as exc:
                self._logger.error(
                    f"Handler {handler!r} failed for event {event.name}: {exc}",
                    exc_info=True,
                )


class FanOutEventPublisher(IEventPublisher):
    """Publishes every message to several publishers; one failing never blocks the rest."""

    def __init__(self, publishers: Sequence[IEventPublisher]) -> None:
        self._publishers = list(publishers)
        self._logger = get_logger("orchestration.fan_out")

    async def publish(self, topic: str, payload: dict[str, Any]) -> None:
        for publisher in self._publishers:
            try:
                await publisher.publish(topic, payload)
            except Exception as exc:
                self._logger.error(
                    f"Publisher {type(publisher).__name__} failed for {topic}: {exc}",
                    exc_info=True,
                )
