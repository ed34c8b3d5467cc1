"""
Snapshot value objects captured at order/schedule time.

These are structured copies of cart and address data. They are not live
references: catalog price changes never alter a snapshot.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class ShippingAddress:
    """Delivery address snapshot."""
    street: str
    city: str
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    delivery_point: Optional[str] = None

    def __post_init__(self):
        if not self.street or not self.city:
            raise ValueError("Shipping address requires street and city")


@dataclass(frozen=True)
class CartItemSnapshot:
    """
    One cart line as it looked when a schedule was saved.

    Attributes:
        product_id: Catalog product identifier
        product_name: Product name at snapshot time
        price: Unit price (per item, or per kg for weighted lines)
        quantity: Item count (ignored when weight is set)
        weight: Weight in kg for loose produce
    """
    product_id: int
    product_name: str
    price: Decimal
    quantity: Optional[int] = None
    weight: Optional[Decimal] = None
