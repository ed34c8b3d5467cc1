"""Application service for the order lifecycle."""

import logging
from collections import OrderedDict
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from freshcart.application.dtos.order_dto import (
    CartItemDTO,
    CreateOrderRequest,
    FrequentProductDTO,
    OrderDTO,
    OrderItemDTO,
    ShippingAddressDTO,
)
from freshcart.application.interfaces import ICatalogClient, IEventPublisher
from freshcart.data.uow import create_uow
from freshcart.domain.entities import CarbonFootprintHistory, Order, OrderLine
from freshcart.domain.enums import OrderStatus
from freshcart.domain.exceptions import AccessDeniedError, NotFoundError, ValidationError
from freshcart.domain.services.carbon import CarbonFootprintEstimator
from freshcart.domain.services.pricing import PricingCalculator
from freshcart.domain.value_objects import Identity, OrderNumber, ShippingAddress, round_half_up

logger = logging.getLogger(__name__)

FREQUENT_PRODUCT_MIN_TIMES = 2
FREQUENT_PRODUCT_LIMIT = 10


class OrderLifecycleService:
    """
    Application service for creating orders and moving them through their lifecycle.

    Responsibilities:
    - Price and persist orders (one code path for checkout, register and scheduler)
    - Run best-effort side effects: carbon estimate, stock decrement, events
    - Decrement stock exactly once, on the edge into CONFIRMED
    - Transform between DTOs and domain entities
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        catalog_client: ICatalogClient,
        event_publisher: IEventPublisher,
        pricing: Optional[PricingCalculator] = None,
        estimator: Optional[CarbonFootprintEstimator] = None,
    ) -> None:
        """Initialize order lifecycle service.

        Args:
            session_factory: SQLAlchemy async session factory
            catalog_client: Catalog stock collaborator
            event_publisher: Event publisher for order events
            pricing: Pricing rules (defaults to the standard grocery rates)
            estimator: Carbon estimator (defaults to the standard emission tables)
        """
        self._session_factory = session_factory
        self._catalog = catalog_client
        self._publisher = event_publisher
        self._pricing = pricing or PricingCalculator()
        self._estimator = estimator or CarbonFootprintEstimator()

    # =========================================================================
    # COMMANDS
    # =========================================================================

    async def create_order(
        self, request: CreateOrderRequest, identity: Optional[Identity] = None
    ) -> OrderDTO:
        """Create a new order.

        Args:
            request: CreateOrderRequest DTO
            identity: Calling user; None for internal callers such as the scheduler

        Returns:
            OrderDTO with created order details

        Raises:
            AccessDeniedError: If the caller may not order for ``request.user_id``
            ValidationError: If the request is incomplete
        """
        if identity is not None:
            if not identity.can_act_for(request.user_id):
                raise AccessDeniedError("Cannot create orders for another user")
            if request.is_pos_order and not identity.is_admin:
                raise AccessDeniedError("Point-of-sale orders require the ADMIN role")

        # 1. Transform DTO to domain entity
        lines = self._lines_from_request(request.items)
        prices = self._pricing.calculate(lines, is_pos_order=request.is_pos_order)
        order = Order.place(
            user_id=request.user_id,
            lines=lines,
            prices=prices,
            is_pos_order=request.is_pos_order,
            payment_method=request.payment_method,
            shipping_address=self._address_from_dto(request.shipping_address),
            delivery_distance_km=request.delivery_distance_km,
            packaging_type=request.packaging_type,
        )

        # 2. Persist and commit
        async with create_uow(self._session_factory) as uow:
            await uow.orders.add(order)
            await uow.commit()

        logger.info(
            f"Order created: {order.order_number} (user={order.user_id}, "
            f"status={order.status.value}, total={order.total_amount})"
        )

        # 3. Best-effort side effects
        await self._record_carbon_footprint(order)
        if order.status == OrderStatus.CONFIRMED:
            await self._decrement_stock(order)
        order.record_created()
        await self._publish_events(order)

        return self._order_to_dto(order)

    async def create_pos_order(self, request: CreateOrderRequest, identity: Identity) -> OrderDTO:
        """Create a point-of-sale order (admin only).

        Args:
            request: CreateOrderRequest DTO; ``is_pos_order`` is forced on
            identity: Calling user

        Returns:
            OrderDTO with created order details
        """
        if not identity.is_admin:
            raise AccessDeniedError("Point-of-sale orders require the ADMIN role")
        pos_request = request.model_copy(update={"is_pos_order": True})
        return await self.create_order(pos_request, identity)

    async def update_order_status(self, order_id: int, new_status: OrderStatus) -> OrderDTO:
        """Move an order to ``new_status``.

        Args:
            order_id: Order id
            new_status: Target status

        Returns:
            Updated OrderDTO
        """
        async with create_uow(self._session_factory) as uow:
            order = await uow.orders.find_by_id(order_id, for_update=True)
            if order is None:
                raise NotFoundError("Order", order_id)
            previous = order.change_status(new_status)
            await uow.orders.save(order)
            await uow.commit()

        return await self._after_status_change(order, previous)

    async def update_order_status_by_number(
        self, order_number: str, new_status: OrderStatus
    ) -> OrderDTO:
        """Move an order, found by its number, to ``new_status``.

        Args:
            order_number: ORD-XXXXXXXX string
            new_status: Target status

        Returns:
            Updated OrderDTO
        """
        number = self._parse_order_number(order_number)
        async with create_uow(self._session_factory) as uow:
            order = await uow.orders.find_by_number(number, for_update=True)
            if order is None:
                raise NotFoundError("Order", order_number)
            previous = order.change_status(new_status)
            await uow.orders.save(order)
            await uow.commit()

        return await self._after_status_change(order, previous)

    # =========================================================================
    # QUERIES
    # =========================================================================

    async def get_order(self, order_id: int) -> OrderDTO:
        """Get order by id.

        Args:
            order_id: Order id

        Returns:
            OrderDTO

        Raises:
            NotFoundError: If the order does not exist
        """
        async with create_uow(self._session_factory) as uow:
            order = await uow.orders.find_by_id(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return self._order_to_dto(order)

    async def get_order_by_number(self, order_number: str) -> OrderDTO:
        number = self._parse_order_number(order_number)
        async with create_uow(self._session_factory) as uow:
            order = await uow.orders.find_by_number(number)
        if order is None:
            raise NotFoundError("Order", order_number)
        return self._order_to_dto(order)

    async def list_user_orders(self, user_id: int) -> List[OrderDTO]:
        """List a user's orders, newest first."""
        async with create_uow(self._session_factory) as uow:
            orders = await uow.orders.find_by_user(user_id)
        return [self._order_to_dto(order) for order in orders]

    async def list_all_orders(self, is_pos_order: Optional[bool] = None) -> List[OrderDTO]:
        """List all orders, optionally only register or only online ones."""
        async with create_uow(self._session_factory) as uow:
            orders = await uow.orders.find_all(is_pos_order=is_pos_order)
        return [self._order_to_dto(order) for order in orders]

    async def get_frequently_ordered_products(self, user_id: int) -> List[FrequentProductDTO]:
        """Products the user keeps ordering online.

        Args:
            user_id: User id

        Returns:
            Up to 10 products ordered at least twice, most frequent first
        """
        async with create_uow(self._session_factory) as uow:
            orders = await uow.orders.find_by_user(user_id)

        # Newest orders first, so the first line seen carries the latest name
        grouped: Dict[int, List[tuple]] = OrderedDict()
        for order in orders:
            if order.is_pos_order:
                continue
            for line in order.lines:
                grouped.setdefault(line.product_id, []).append((order, line))

        products = []
        for product_id, entries in grouped.items():
            if len(entries) < FREQUENT_PRODUCT_MIN_TIMES:
                continue
            lines = [line for _, line in entries]
            count = len(lines)
            weights = [line.weight for line in lines if line.weight is not None]
            total_quantity = sum(line.quantity if line.quantity is not None else 1 for line in lines)

            products.append(
                FrequentProductDTO(
                    product_id=product_id,
                    product_name=lines[0].product_name,
                    times_ordered=count,
                    average_price=round_half_up(sum((line.price for line in lines), Decimal("0")) / count),
                    average_quantity=total_quantity // count,
                    average_weight=(
                        round_half_up(sum(weights, Decimal("0")) / len(weights))
                        if weights and sum(weights, Decimal("0")) > 0
                        else None
                    ),
                    last_ordered_date=max(order.created_at for order, _ in entries).date(),
                )
            )

        products.sort(key=lambda product: product.times_ordered, reverse=True)
        return products[:FREQUENT_PRODUCT_LIMIT]

    async def get_reorder_items(self, order_id: int, user_id: int) -> List[CartItemDTO]:
        """Lines of a past order, ready to put back into a cart.

        Raises:
            NotFoundError: If the order does not exist or belongs to another user
        """
        async with create_uow(self._session_factory) as uow:
            order = await uow.orders.find_by_id(order_id)
        if order is None or order.user_id != user_id:
            raise NotFoundError("Order", order_id)

        return [
            CartItemDTO(
                product_id=line.product_id,
                product_name=line.product_name,
                price=line.price,
                quantity=line.quantity,
                weight=line.weight,
            )
            for line in order.lines
        ]

    # =========================================================================
    # SIDE EFFECTS (best-effort)
    # =========================================================================

    async def _after_status_change(self, order: Order, previous: OrderStatus) -> OrderDTO:
        logger.info(
            f"Order {order.order_number} status: {previous.value} -> {order.status.value}"
        )
        if Order.enters_confirmed(previous, order.status):
            await self._decrement_stock(order)
        await self._publish_events(order)
        return self._order_to_dto(order)

    async def _record_carbon_footprint(self, order: Order) -> None:
        """Estimate and store the order's footprint; failures are only logged."""
        previous = (order.carbon_footprint_kg, order.delivery_distance_km, order.packaging_type)
        try:
            estimate = self._estimator.estimate(
                order.lines,
                delivery_distance_km=order.delivery_distance_km,
                packaging_type=order.packaging_type,
            )
            order.record_carbon(estimate)

            async with create_uow(self._session_factory) as uow:
                await uow.orders.save_carbon(order)
                await uow.carbon_history.add(
                    CarbonFootprintHistory(
                        user_id=order.user_id,
                        order_id=order.id,
                        carbon_footprint_kg=estimate.total_kg,
                        order_date=order.created_at.date(),
                    )
                )
                await uow.commit()

            logger.info(
                f"Carbon footprint saved for order {order.order_number}: {estimate.total_kg} kg CO2"
            )
        except Exception as e:
            order.carbon_footprint_kg, order.delivery_distance_km, order.packaging_type = previous
            logger.warning(
                f"Failed to save carbon footprint for order {order.order_number}: {e}",
                exc_info=True,
            )

    async def _decrement_stock(self, order: Order) -> None:
        """Decrement stock line by line; a failing line does not stop the others."""
        for line in order.lines:
            try:
                await self._catalog.decrement_stock(line.product_id, line.stock_units())
            except Exception as e:
                logger.error(
                    f"Failed to decrement stock for product {line.product_id} "
                    f"(order {order.order_number}): {e}",
                    exc_info=True,
                )

    async def _publish_events(self, order: Order) -> None:
        for event in order.pull_domain_events():
            try:
                await self._publisher.publish(event.topic, event.to_dict())
            except Exception as e:
                logger.error(
                    f"Failed to publish {event.topic} for order {order.order_number}: {e}",
                    exc_info=True,
                )

    # =========================================================================
    # MAPPING
    # =========================================================================

    @staticmethod
    def _parse_order_number(order_number: str) -> OrderNumber:
        try:
            return OrderNumber(value=order_number)
        except ValueError:
            # Malformed numbers can never exist
            raise NotFoundError("Order", order_number)

    @staticmethod
    def _lines_from_request(items: List[OrderItemDTO]) -> List[OrderLine]:
        if not items:
            raise ValidationError("Order items are required")
        lines = []
        for item in items:
            if item.price < 0:
                raise ValidationError(f"Price must not be negative (product {item.product_id})")
            lines.append(
                OrderLine(
                    product_id=item.product_id,
                    product_name=item.product_name,
                    price=item.price,
                    quantity=item.quantity,
                    weight=item.weight,
                )
            )
        return lines

    @staticmethod
    def _address_from_dto(dto: Optional[ShippingAddressDTO]) -> Optional[ShippingAddress]:
        if dto is None:
            return None
        return ShippingAddress(
            street=dto.street,
            city=dto.city,
            state=dto.state,
            zip_code=dto.zip_code,
            country=dto.country,
            delivery_point=dto.delivery_point,
        )

    @staticmethod
    def _address_to_dto(address: Optional[ShippingAddress]) -> Optional[ShippingAddressDTO]:
        if address is None:
            return None
        return ShippingAddressDTO(
            street=address.street,
            city=address.city,
            state=address.state,
            zip_code=address.zip_code,
            country=address.country,
            delivery_point=address.delivery_point,
        )

    def _order_to_dto(self, order: Order) -> OrderDTO:
        """Transform Order domain entity to OrderDTO.

        Args:
            order: Order domain entity

        Returns:
            OrderDTO instance
        """
        items = [
            OrderItemDTO(
                id=line.id,
                product_id=line.product_id,
                product_name=line.product_name,
                price=line.price,
                quantity=line.quantity,
                weight=line.weight,
            )
            for line in order.lines
        ]

        return OrderDTO(
            id=order.id,
            order_number=order.order_number.value,
            user_id=order.user_id,
            items=items,
            subtotal=order.subtotal.amount,
            tax_amount=order.tax_amount.amount,
            delivery_fee=order.delivery_fee.amount,
            total_amount=order.total_amount.amount,
            status=order.status,
            payment_method=order.payment_method,
            is_pos_order=order.is_pos_order,
            shipping_address=self._address_to_dto(order.shipping_address),
            carbon_footprint_kg=order.carbon_footprint_kg,
            delivery_distance_km=order.delivery_distance_km,
            packaging_type=order.packaging_type,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
