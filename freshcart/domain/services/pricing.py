"""
Order pricing.

Pure function over priced lines; no I/O and no error conditions
(lines are validated upstream).
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional, Protocol

from ..value_objects import Money, round_half_up, to_decimal

DEFAULT_TAX_RATE = Decimal("0.061")
DEFAULT_DELIVERY_FEE = Decimal("10.00")
DEFAULT_FREE_DELIVERY_THRESHOLD = Decimal("100.00")


class PricedLine(Protocol):
    """Anything with a unit price and either a quantity or a weight."""

    price: Decimal
    quantity: Optional[int]
    weight: Optional[Decimal]


@dataclass(frozen=True)
class PriceBreakdown:
    """Priced totals of an order. ``total = subtotal + tax + delivery_fee``."""
    subtotal: Money
    tax: Money
    delivery_fee: Money
    total: Money


class PricingCalculator:
    """
    Computes subtotal, tax, delivery fee and total.

    Rules:
    - weighted lines cost price x weight, others price x quantity (default 1)
    - tax is subtotal x tax rate, rounded half-up to cents
    - online orders under the free-delivery threshold (after tax) pay the
      delivery fee; point-of-sale orders never do
    """

    def __init__(
        self,
        tax_rate: Decimal = DEFAULT_TAX_RATE,
        delivery_fee: Decimal = DEFAULT_DELIVERY_FEE,
        free_delivery_threshold: Decimal = DEFAULT_FREE_DELIVERY_THRESHOLD,
        currency: str = "USD",
    ) -> None:
        self._tax_rate = to_decimal(tax_rate)
        self._delivery_fee = to_decimal(delivery_fee)
        self._free_delivery_threshold = to_decimal(free_delivery_threshold)
        self._currency = currency

    @staticmethod
    def line_subtotal(line: PricedLine) -> Decimal:
        """Exact (unrounded) line amount."""
        price = to_decimal(line.price)
        if line.weight is not None and to_decimal(line.weight) > 0:
            return price * to_decimal(line.weight)
        quantity = line.quantity if line.quantity is not None else 1
        return price * quantity

    def calculate(self, lines: Iterable[PricedLine], is_pos_order: bool = False) -> PriceBreakdown:
        """
        Price a set of lines.

        Args:
            lines: Order or cart lines
            is_pos_order: Point-of-sale orders carry no delivery fee

        Returns:
            PriceBreakdown with all amounts in cents
        """
        subtotal = round_half_up(sum((self.line_subtotal(line) for line in lines), Decimal("0")))
        tax = round_half_up(subtotal * self._tax_rate)

        if is_pos_order or subtotal + tax >= self._free_delivery_threshold:
            delivery_fee = Decimal("0.00")
        else:
            delivery_fee = self._delivery_fee

        return PriceBreakdown(
            subtotal=Money(subtotal, self._currency),
            tax=Money(tax, self._currency),
            delivery_fee=Money(delivery_fee, self._currency),
            total=Money(subtotal + tax + delivery_fee, self._currency),
        )
