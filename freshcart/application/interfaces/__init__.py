"""Application layer interfaces."""
from abc import ABC, abstractmethod
from typing import Any, Dict


class ICatalogClient(ABC):
    """
    Interface for the catalog stock service.

    Implementations are best-effort: failures are logged by the
    implementation and never raised to the order flow.
    """

    @abstractmethod
    async def decrement_stock(self, product_id: int, quantity: int) -> None:
        """
        Take ``quantity`` units of a product out of stock.

        Args:
            product_id: Catalog product id
            quantity: Units to remove (positive)
        """
        pass


class IEventPublisher(ABC):
    """
    Interface for publishing integration events.

    Fire-and-forget from the caller's point of view.
    """

    @abstractmethod
    async def publish(self, topic: str, payload: Dict[str, Any]) -> None:
        """
        Publish a payload on a topic.

        Args:
            topic: Topic name (e.g. "order.created")
            payload: JSON-serializable message body
        """
        pass


__all__ = ["ICatalogClient", "IEventPublisher"]
