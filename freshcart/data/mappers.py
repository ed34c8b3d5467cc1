"""Static mappers for domain entities ↔ database models."""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from freshcart.domain.entities import (
    CarbonFootprintHistory,
    Order,
    OrderExecutionHistory,
    OrderLine,
    ScheduledOrder,
    ScheduledOrderLine,
)
from freshcart.domain.enums import (
    ExecutionOutcome,
    OrderStatus,
    OrderType,
    PackagingType,
    PaymentMethod,
    RecurrenceType,
    ScheduledOrderStatus,
)
from freshcart.domain.value_objects import CartItemSnapshot, Money, OrderNumber, ShippingAddress

from .models import (
    CarbonFootprintHistoryModel,
    OrderExecutionHistoryModel,
    OrderItemModel,
    OrderModel,
    ScheduledOrderItemModel,
    ScheduledOrderModel,
)


def _decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(str(value))


class SnapshotMapper:
    """JSON (de)serialization of snapshot value objects."""

    @staticmethod
    def address_to_json(address: Optional[ShippingAddress]) -> Optional[Dict[str, Any]]:
        if address is None:
            return None
        return {
            "street": address.street,
            "city": address.city,
            "state": address.state,
            "zipCode": address.zip_code,
            "country": address.country,
            "deliveryPoint": address.delivery_point,
        }

    @staticmethod
    def address_from_json(data: Optional[Dict[str, Any]]) -> Optional[ShippingAddress]:
        if not data:
            return None
        return ShippingAddress(
            street=data["street"],
            city=data["city"],
            state=data.get("state"),
            zip_code=data.get("zipCode"),
            country=data.get("country"),
            delivery_point=data.get("deliveryPoint"),
        )

    @staticmethod
    def cart_to_json(items: List[CartItemSnapshot]) -> List[Dict[str, Any]]:
        return [
            {
                "productId": item.product_id,
                "productName": item.product_name,
                "price": str(item.price),
                "quantity": item.quantity,
                "weight": str(item.weight) if item.weight is not None else None,
            }
            for item in items
        ]

    @staticmethod
    def cart_from_json(data: Optional[List[Dict[str, Any]]]) -> List[CartItemSnapshot]:
        return [
            CartItemSnapshot(
                product_id=item["productId"],
                product_name=item["productName"],
                price=Decimal(str(item["price"])),
                quantity=item.get("quantity"),
                weight=_decimal(item.get("weight")),
            )
            for item in data or []
        ]


class OrderLineMapper:
    """Static mapper for OrderLine ↔ OrderItemModel transformation."""

    @staticmethod
    def to_domain(model: OrderItemModel) -> OrderLine:
        """Convert ORM model to domain entity.

        Args:
            model: OrderItemModel instance

        Returns:
            OrderLine domain entity
        """
        return OrderLine(
            id=model.id,
            product_id=model.product_id,
            product_name=model.product_name,
            price=Decimal(str(model.price)),
            quantity=model.quantity,
            weight=_decimal(model.weight),
        )

    @staticmethod
    def to_persistence(entity: OrderLine) -> OrderItemModel:
        """Convert domain entity to ORM model.

        Args:
            entity: OrderLine domain entity

        Returns:
            OrderItemModel instance
        """
        return OrderItemModel(
            product_id=entity.product_id,
            product_name=entity.product_name,
            price=entity.price,
            quantity=entity.quantity,
            weight=entity.weight,
        )


class OrderMapper:
    """Static mapper for Order ↔ OrderModel transformation with nested items."""

    @staticmethod
    def to_domain(model: OrderModel) -> Order:
        """Convert ORM model to domain aggregate (with nested lines).

        Args:
            model: OrderModel instance

        Returns:
            Order domain aggregate
        """
        currency = model.currency or "USD"
        return Order(
            id=model.id,
            order_number=OrderNumber(value=model.order_number),
            user_id=model.user_id,
            lines=[OrderLineMapper.to_domain(item) for item in model.items],
            subtotal=Money(Decimal(str(model.subtotal)), currency),
            tax_amount=Money(Decimal(str(model.tax_amount)), currency),
            delivery_fee=Money(Decimal(str(model.delivery_fee)), currency),
            total_amount=Money(Decimal(str(model.total_amount)), currency),
            status=OrderStatus(model.status),
            payment_method=PaymentMethod(model.payment_method) if model.payment_method else None,
            is_pos_order=bool(model.is_pos_order),
            shipping_address=SnapshotMapper.address_from_json(model.shipping_address),
            carbon_footprint_kg=_decimal(model.carbon_footprint_kg),
            delivery_distance_km=_decimal(model.delivery_distance_km),
            packaging_type=PackagingType(model.packaging_type) if model.packaging_type else None,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @staticmethod
    def to_persistence(entity: Order) -> OrderModel:
        """Convert domain aggregate to ORM model (with nested lines).

        Args:
            entity: Order domain aggregate

        Returns:
            OrderModel instance
        """
        order_model = OrderModel(
            order_number=entity.order_number.value,
            user_id=entity.user_id,
            subtotal=entity.subtotal.amount,
            tax_amount=entity.tax_amount.amount,
            delivery_fee=entity.delivery_fee.amount,
            total_amount=entity.total_amount.amount,
            currency=entity.total_amount.currency,
            is_pos_order=entity.is_pos_order,
            shipping_address=SnapshotMapper.address_to_json(entity.shipping_address),
            created_at=entity.created_at,
        )
        OrderMapper.update_persistence(entity, order_model)

        order_model.items = [OrderLineMapper.to_persistence(line) for line in entity.lines]
        return order_model

    @staticmethod
    def update_persistence(entity: Order, model: OrderModel) -> OrderModel:
        """Copy the mutable fields of an order onto an existing ORM model.

        Args:
            entity: Order domain aggregate
            model: Existing OrderModel instance

        Returns:
            Updated OrderModel instance
        """
        model.status = entity.status.value
        model.payment_method = entity.payment_method.value if entity.payment_method else None
        model.carbon_footprint_kg = entity.carbon_footprint_kg
        model.delivery_distance_km = entity.delivery_distance_km
        model.packaging_type = entity.packaging_type.value if entity.packaging_type else None
        model.updated_at = entity.updated_at
        return model


class ExecutionHistoryMapper:
    """Static mapper for OrderExecutionHistory ↔ OrderExecutionHistoryModel."""

    @staticmethod
    def to_domain(model: OrderExecutionHistoryModel) -> OrderExecutionHistory:
        return OrderExecutionHistory(
            id=model.id,
            scheduled_order_id=model.scheduled_order_id,
            executed_order_id=model.executed_order_id,
            execution_date=model.execution_date,
            status=ExecutionOutcome(model.status),
            error_message=model.error_message,
        )

    @staticmethod
    def to_persistence(entity: OrderExecutionHistory) -> OrderExecutionHistoryModel:
        return OrderExecutionHistoryModel(
            executed_order_id=entity.executed_order_id,
            execution_date=entity.execution_date,
            status=entity.status.value,
            error_message=entity.error_message,
        )


class ScheduledOrderMapper:
    """Static mapper for ScheduledOrder ↔ ScheduledOrderModel with lines and history."""

    @staticmethod
    def to_domain(model: ScheduledOrderModel) -> ScheduledOrder:
        """Convert ORM model to domain aggregate.

        Args:
            model: ScheduledOrderModel instance

        Returns:
            ScheduledOrder domain aggregate
        """
        lines = [
            ScheduledOrderLine(
                id=item.id,
                product_id=item.product_id,
                product_name=item.product_name,
                price=Decimal(str(item.price)),
                quantity=item.quantity,
                weight=_decimal(item.weight),
                subtotal=Decimal(str(item.subtotal)),
            )
            for item in model.items
        ]

        return ScheduledOrder(
            id=model.id,
            user_id=model.user_id,
            order_name=model.order_name,
            order_type=OrderType(model.order_type),
            recurrence_type=RecurrenceType(model.recurrence_type) if model.recurrence_type else None,
            scheduled_date=model.scheduled_date,
            scheduled_time=model.scheduled_time,
            delivery_date=model.delivery_date,
            delivery_time=model.delivery_time,
            status=ScheduledOrderStatus(model.status),
            next_execution_date=model.next_execution_date,
            end_date=model.end_date,
            max_occurrences=model.max_occurrences,
            current_occurrence=model.current_occurrence or 0,
            cart_snapshot=SnapshotMapper.cart_from_json(model.cart_snapshot),
            shipping_address=SnapshotMapper.address_from_json(model.shipping_address),
            delivery_point=model.delivery_point,
            notes=model.notes,
            lines=lines,
            execution_history=[
                ExecutionHistoryMapper.to_domain(execution) for execution in model.executions
            ],
            version=model.version or 0,
            claimed_at=model.claimed_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @staticmethod
    def to_persistence(entity: ScheduledOrder) -> ScheduledOrderModel:
        """Convert domain aggregate to a new ORM model.

        Args:
            entity: ScheduledOrder domain aggregate

        Returns:
            ScheduledOrderModel instance
        """
        model = ScheduledOrderModel(
            user_id=entity.user_id,
            version=entity.version,
            created_at=entity.created_at,
            items=[],
            executions=[],
        )
        ScheduledOrderMapper.update_persistence(entity, model)
        return model

    @staticmethod
    def update_persistence(entity: ScheduledOrder, model: ScheduledOrderModel) -> ScheduledOrderModel:
        """Copy entity state onto an ORM model.

        Lines are rebuilt; history entries without an id are appended.

        Args:
            entity: ScheduledOrder domain aggregate
            model: ScheduledOrderModel instance

        Returns:
            Updated ScheduledOrderModel instance
        """
        model.order_name = entity.order_name
        model.order_type = entity.order_type.value
        model.recurrence_type = entity.recurrence_type.value if entity.recurrence_type else None
        model.scheduled_date = entity.scheduled_date
        model.scheduled_time = entity.scheduled_time
        model.delivery_date = entity.delivery_date
        model.delivery_time = entity.delivery_time
        model.status = entity.status.value
        model.next_execution_date = entity.next_execution_date
        model.end_date = entity.end_date
        model.max_occurrences = entity.max_occurrences
        model.current_occurrence = entity.current_occurrence
        model.cart_snapshot = SnapshotMapper.cart_to_json(entity.cart_snapshot)
        model.shipping_address = SnapshotMapper.address_to_json(entity.shipping_address)
        model.delivery_point = entity.delivery_point
        model.notes = entity.notes
        model.claimed_at = entity.claimed_at
        model.updated_at = entity.updated_at

        # Rebuild lines only when they changed
        current_ids = [item.id for item in model.items]
        if current_ids != [line.id for line in entity.lines] or any(
            line.id is None for line in entity.lines
        ):
            model.items.clear()
            model.items.extend(
                ScheduledOrderItemModel(
                    product_id=line.product_id,
                    product_name=line.product_name,
                    price=line.price,
                    quantity=line.quantity,
                    weight=line.weight,
                    subtotal=line.subtotal,
                )
                for line in entity.lines
            )

        # History is append-only
        for record in entity.execution_history:
            if record.id is None:
                model.executions.append(ExecutionHistoryMapper.to_persistence(record))

        return model


class CarbonHistoryMapper:
    """Static mapper for CarbonFootprintHistory ↔ CarbonFootprintHistoryModel."""

    @staticmethod
    def to_domain(model: CarbonFootprintHistoryModel) -> CarbonFootprintHistory:
        return CarbonFootprintHistory(
            id=model.id,
            user_id=model.user_id,
            order_id=model.order_id,
            carbon_footprint_kg=Decimal(str(model.carbon_footprint_kg)),
            order_date=model.order_date,
            created_at=model.created_at,
        )

    @staticmethod
    def to_persistence(entity: CarbonFootprintHistory) -> CarbonFootprintHistoryModel:
        return CarbonFootprintHistoryModel(
            user_id=entity.user_id,
            order_id=entity.order_id,
            carbon_footprint_kg=entity.carbon_footprint_kg,
            order_date=entity.order_date,
            created_at=entity.created_at,
        )
