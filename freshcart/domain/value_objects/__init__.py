"""Domain value objects."""

from .value_objects import (
    CARBON_PLACES,
    MONEY_PLACES,
    Identity,
    Money,
    round_half_up,
    to_decimal,
)
from .order_number import OrderNumber
from .snapshots import CartItemSnapshot, ShippingAddress

__all__ = [
    "CARBON_PLACES",
    "MONEY_PLACES",
    "CartItemSnapshot",
    "Identity",
    "Money",
    "OrderNumber",
    "ShippingAddress",
    "round_half_up",
    "to_decimal",
]
