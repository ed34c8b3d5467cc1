"""
Order aggregate root.

CRITICAL: This file must contain ZERO imports from:
- sqlalchemy
- pydantic
- fastapi
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from ..enums import OrderStatus, PackagingType, PaymentMethod
from ..events import DomainEvent, OrderCreatedEvent, OrderStatusChangedEvent
from ..exceptions import ValidationError
from ..value_objects import Money, OrderNumber, ShippingAddress

if TYPE_CHECKING:
    from ..services.carbon import CarbonEstimate
    from ..services.pricing import PriceBreakdown


@dataclass
class OrderLine:
    """Individual line item within an order (price and name are snapshots)."""
    product_id: int
    product_name: str
    price: Decimal
    quantity: Optional[int] = None
    weight: Optional[Decimal] = None
    id: Optional[int] = None

    @property
    def is_weighted(self) -> bool:
        return self.weight is not None and self.weight > 0

    def stock_units(self) -> int:
        """Units to take out of stock; weighted lines count as one unit."""
        if self.is_weighted:
            return 1
        return self.quantity if self.quantity is not None else 1


@dataclass
class Order:
    """
    Order aggregate root.

    Everything except status and the carbon fields is fixed at creation.
    Totals always satisfy ``total = subtotal + tax + delivery fee``.
    """
    order_number: OrderNumber
    user_id: int
    lines: List[OrderLine]
    subtotal: Money
    tax_amount: Money
    delivery_fee: Money
    total_amount: Money
    status: OrderStatus = OrderStatus.PENDING
    payment_method: Optional[PaymentMethod] = None
    is_pos_order: bool = False
    shipping_address: Optional[ShippingAddress] = None

    # Best-effort carbon estimate
    carbon_footprint_kg: Optional[Decimal] = None
    delivery_distance_km: Optional[Decimal] = None
    packaging_type: Optional[PackagingType] = None

    id: Optional[int] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    _domain_events: List[DomainEvent] = field(default_factory=list, init=False, repr=False)

    @classmethod
    def place(
        cls,
        user_id: int,
        lines: List[OrderLine],
        prices: "PriceBreakdown",
        is_pos_order: bool = False,
        payment_method: Optional[PaymentMethod] = None,
        shipping_address: Optional[ShippingAddress] = None,
        delivery_distance_km: Optional[Decimal] = None,
        packaging_type: Optional[PackagingType] = None,
    ) -> "Order":
        """
        Create a new order from priced lines.

        Point-of-sale orders are settled at the register and start CONFIRMED;
        online orders wait for payment in PENDING.

        Raises:
            ValidationError: If lines are empty or an online order has no address
        """
        if not lines:
            raise ValidationError("Order must contain at least one line")
        if not is_pos_order and shipping_address is None:
            raise ValidationError("Shipping address is required for online orders")

        return cls(
            order_number=OrderNumber.generate(),
            user_id=user_id,
            lines=list(lines),
            subtotal=prices.subtotal,
            tax_amount=prices.tax,
            delivery_fee=prices.delivery_fee,
            total_amount=prices.total,
            status=OrderStatus.CONFIRMED if is_pos_order else OrderStatus.PENDING,
            payment_method=payment_method,
            is_pos_order=is_pos_order,
            shipping_address=shipping_address,
            delivery_distance_km=delivery_distance_km,
            packaging_type=packaging_type,
        )

    @staticmethod
    def enters_confirmed(previous: OrderStatus, new: OrderStatus) -> bool:
        """True only on the edge into CONFIRMED (never CONFIRMED -> CONFIRMED)."""
        return previous != OrderStatus.CONFIRMED and new == OrderStatus.CONFIRMED

    def change_status(self, new_status: OrderStatus) -> OrderStatus:
        """
        Move the order to ``new_status``.

        Transitions are not restricted; callers decide which ones make sense.

        Returns:
            The status before the change
        """
        previous = self.status
        self.status = new_status
        self.updated_at = datetime.utcnow()
        if previous != new_status:
            self._domain_events.append(
                OrderStatusChangedEvent(
                    order_number=self.order_number.value,
                    previous_status=previous.value,
                    new_status=new_status.value,
                    user_id=self.user_id,
                )
            )
        return previous

    def record_carbon(self, estimate: "CarbonEstimate") -> None:
        """Store the carbon estimate on the order."""
        self.carbon_footprint_kg = estimate.total_kg
        self.delivery_distance_km = estimate.delivery_distance_km
        self.packaging_type = estimate.packaging_type
        self.updated_at = datetime.utcnow()

    def record_created(self) -> None:
        """Record OrderCreatedEvent once the order has been persisted."""
        self._domain_events.append(
            OrderCreatedEvent(
                order_id=self.id,
                order_number=self.order_number.value,
                status=self.status.value,
                total_amount=self.total_amount.amount,
                is_pos_order=self.is_pos_order,
                user_id=self.user_id,
            )
        )

    def pull_domain_events(self) -> List[DomainEvent]:
        """Return collected events and clear them."""
        events = list(self._domain_events)
        self._domain_events.clear()
        return events
