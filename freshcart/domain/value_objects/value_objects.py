"""Domain value objects - pure Python immutable types."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

MONEY_PLACES = Decimal("0.01")
CARBON_PLACES = Decimal("0.0001")

Number = Union[Decimal, int, str, float]


def round_half_up(value: Decimal, places: Decimal = MONEY_PLACES) -> Decimal:
    """Round a Decimal half-up to the given exponent (defaults to cents)."""
    return value.quantize(places, rounding=ROUND_HALF_UP)


def to_decimal(value: Number) -> Decimal:
    """Coerce a numeric value to Decimal without float artifacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class Money:
    """
    Immutable monetary value with currency.

    Amounts are always kept as Decimal and quantized to cents
    with half-up rounding.

    CRITICAL: Always use Decimal, never float!
    """
    amount: Decimal
    currency: str = "USD"

    def __post_init__(self):
        object.__setattr__(self, "amount", round_half_up(to_decimal(self.amount)))

        # Validate currency code (3 letters)
        if not isinstance(self.currency, str) or len(self.currency) != 3:
            raise ValueError(
                f"Currency must be 3-letter ISO code, got: {self.currency}"
            )

    @classmethod
    def zero(cls, currency: str = "USD") -> "Money":
        """Zero amount in the given currency."""
        return cls(amount=Decimal("0.00"), currency=currency)

    def __str__(self) -> str:
        return f"{self.amount} {self.currency}"

    def __add__(self, other: "Money") -> "Money":
        """Add two Money objects (must have same currency)."""
        if self.currency != other.currency:
            raise ValueError(
                f"Cannot add different currencies: {self.currency} vs {other.currency}"
            )
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __sub__(self, other: "Money") -> "Money":
        """Subtract two Money objects (must have same currency)."""
        if self.currency != other.currency:
            raise ValueError(
                f"Cannot subtract different currencies: {self.currency} vs {other.currency}"
            )
        return Money(amount=self.amount - other.amount, currency=self.currency)

    def __lt__(self, other: "Money") -> bool:
        if self.currency != other.currency:
            raise ValueError(
                f"Cannot compare different currencies: {self.currency} vs {other.currency}"
            )
        return self.amount < other.amount

    def is_zero(self) -> bool:
        """Check if amount is zero."""
        return self.amount == 0

    def is_negative(self) -> bool:
        """Check if amount is negative."""
        return self.amount < 0


@dataclass(frozen=True)
class Identity:
    """
    Authenticated caller, as handed over by the credential verifier.

    The engine never inspects tokens; it only sees the resolved
    user id and role.
    """

    user_id: int
    role: str = "CUSTOMER"

    ADMIN_ROLE = "ADMIN"

    @property
    def is_admin(self) -> bool:
        return self.role.upper() == self.ADMIN_ROLE

    def can_act_for(self, user_id: int) -> bool:
        """Admins act for anyone; everybody else only for themselves."""
        return self.is_admin or self.user_id == user_id
