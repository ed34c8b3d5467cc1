"""Repository interfaces for Order aggregate."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Sequence

from ..entities.order import Order
from ..enums import OrderStatus
from ..value_objects import OrderNumber


class OrderRepository(ABC):
    """Abstract repository for Order aggregate persistence."""

    @abstractmethod
    async def add(self, order: Order) -> Order:
        """Persist a new order with its lines.

        Args:
            order: Order aggregate to persist

        Returns:
            The same order with database ids assigned
        """
        pass

    @abstractmethod
    async def save(self, order: Order) -> None:
        """Persist the mutable fields of an existing order.

        Args:
            order: Order aggregate to update
        """
        pass

    @abstractmethod
    async def save_carbon(self, order: Order) -> None:
        """Persist only the carbon fields of an existing order.

        Status and payment are left as stored, so a confirmation committed
        in the meantime is kept.

        Args:
            order: Order aggregate carrying the recorded estimate
        """
        pass

    @abstractmethod
    async def find_by_id(self, order_id: int, for_update: bool = False) -> Optional[Order]:
        """Retrieve order by database id.

        Args:
            order_id: Order id
            for_update: Lock the row until the transaction ends

        Returns:
            Order if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_number(
        self, order_number: OrderNumber, for_update: bool = False
    ) -> Optional[Order]:
        """Retrieve order by its ORD-XXXXXXXX number.

        Args:
            order_number: OrderNumber identifier
            for_update: Lock the row until the transaction ends

        Returns:
            Order if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_user(self, user_id: int) -> List[Order]:
        """List a user's orders, newest first.

        Args:
            user_id: Owning user id

        Returns:
            List of Order aggregates
        """
        pass

    @abstractmethod
    async def find_all(self, is_pos_order: Optional[bool] = None, limit: int = 500) -> List[Order]:
        """List orders, newest first, optionally filtered by channel.

        Args:
            is_pos_order: True for register orders, False for online, None for both
            limit: Maximum number of orders to return

        Returns:
            List of Order aggregates
        """
        pass

    @abstractmethod
    async def find_by_status_between(
        self, statuses: Sequence[OrderStatus], start: datetime, end: datetime
    ) -> List[Order]:
        """List orders in ``statuses`` created in ``[start, end)``.

        Args:
            statuses: Accepted statuses
            start: Inclusive lower bound on creation time
            end: Exclusive upper bound on creation time

        Returns:
            List of Order aggregates ordered by creation time
        """
        pass
