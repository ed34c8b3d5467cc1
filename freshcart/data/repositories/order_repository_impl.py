"""SQLAlchemy implementation of OrderRepository."""

from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from freshcart.domain.entities import Order
from freshcart.domain.enums import OrderStatus
from freshcart.domain.repositories import OrderRepository
from freshcart.domain.value_objects import OrderNumber

from ..mappers import OrderLineMapper, OrderMapper
from ..models import OrderModel


class SqlAlchemyOrderRepository(OrderRepository):
    """Concrete implementation of OrderRepository using SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with SQLAlchemy session.

        Args:
            session: SQLAlchemy async session
        """
        self._session = session

    async def add(self, order: Order) -> Order:
        """Insert a new order and assign database ids.

        Args:
            order: Order domain aggregate

        Returns:
            The same order with ids set
        """
        model = OrderMapper.to_persistence(order)
        self._session.add(model)
        await self._session.flush()  # Propagate to DB without committing

        order.id = model.id
        order.lines = [OrderLineMapper.to_domain(item) for item in model.items]
        return order

    async def save(self, order: Order) -> None:
        """Update the mutable fields of an existing order.

        Args:
            order: Order domain aggregate
        """
        model = await self._session.get(OrderModel, order.id)
        if model is None:
            raise LookupError(f"Order {order.id} does not exist")

        OrderMapper.update_persistence(order, model)
        await self._session.flush()

    async def save_carbon(self, order: Order) -> None:
        """Write the carbon fields of an order without touching its status.

        Args:
            order: Order domain aggregate
        """
        result = await self._session.execute(
            update(OrderModel)
            .where(OrderModel.id == order.id)
            .values(
                carbon_footprint_kg=order.carbon_footprint_kg,
                delivery_distance_km=order.delivery_distance_km,
                packaging_type=order.packaging_type.value if order.packaging_type else None,
                updated_at=order.updated_at,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise LookupError(f"Order {order.id} does not exist")

    async def find_by_id(self, order_id: int, for_update: bool = False) -> Optional[Order]:
        """Retrieve order by database id.

        Args:
            order_id: Order id
            for_update: Lock the row until the transaction ends

        Returns:
            Order if found, None otherwise
        """
        query = select(OrderModel).where(OrderModel.id == order_id)
        if for_update:
            query = query.with_for_update()
        result = await self._session.execute(query)
        model = result.scalar_one_or_none()

        if not model:
            return None

        return OrderMapper.to_domain(model)

    async def find_by_number(
        self, order_number: OrderNumber, for_update: bool = False
    ) -> Optional[Order]:
        query = select(OrderModel).where(OrderModel.order_number == order_number.value)
        if for_update:
            query = query.with_for_update()
        result = await self._session.execute(query)
        model = result.scalar_one_or_none()
        return OrderMapper.to_domain(model) if model else None

    async def find_by_user(self, user_id: int) -> List[Order]:
        result = await self._session.execute(
            select(OrderModel)
            .where(OrderModel.user_id == user_id)
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        )
        return [OrderMapper.to_domain(model) for model in result.scalars().all()]

    async def find_all(self, is_pos_order: Optional[bool] = None, limit: int = 500) -> List[Order]:
        """List orders, newest first.

        Args:
            is_pos_order: Optional channel filter
            limit: Maximum number of orders to return

        Returns:
            List of Order aggregates
        """
        query = select(OrderModel)
        if is_pos_order is not None:
            query = query.where(OrderModel.is_pos_order == is_pos_order)
        query = query.order_by(OrderModel.created_at.desc(), OrderModel.id.desc()).limit(limit)

        result = await self._session.execute(query)
        return [OrderMapper.to_domain(model) for model in result.scalars().all()]

    async def find_by_status_between(
        self, statuses: Sequence[OrderStatus], start: datetime, end: datetime
    ) -> List[Order]:
        result = await self._session.execute(
            select(OrderModel)
            .where(
                OrderModel.status.in_([status.value for status in statuses]),
                OrderModel.created_at >= start,
                OrderModel.created_at < end,
            )
            .order_by(OrderModel.created_at)
        )
        return [OrderMapper.to_domain(model) for model in result.scalars().all()]
