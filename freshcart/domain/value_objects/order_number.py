"""Order number value object."""
import re
from dataclasses import dataclass
from uuid import uuid4

_ORDER_NUMBER_PATTERN = re.compile(r"^ORD-[0-9A-F]{8}$")


@dataclass(frozen=True)
class OrderNumber:
    """
    Human-facing order identifier.

    Format: ORD-XXXXXXXX (8 uppercase hex characters)
    Examples:
    - ORD-3F2A9C01
    - ORD-B7E41D6A
    """
    value: str

    def __post_init__(self):
        if not self.value:
            raise ValueError("Order number cannot be empty")

        if not _ORDER_NUMBER_PATTERN.match(self.value):
            raise ValueError(
                f"Invalid order number format (expected ORD-XXXXXXXX): {self.value}"
            )

    @classmethod
    def generate(cls) -> "OrderNumber":
        """Generate a new order number from a random UUID."""
        return cls(value=f"ORD-{uuid4().hex[:8].upper()}")

    def __str__(self) -> str:
        return self.value
