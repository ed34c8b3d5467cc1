"""
Order Enums.

Status, payment and packaging values for grocery orders.
"""
from enum import Enum


class OrderStatus(str, Enum):
    """Order lifecycle status values."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class PaymentMethod(str, Enum):
    """How an order was (or will be) paid."""

    CASH = "CASH"
    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    QR_CODE = "QR_CODE"
    ONLINE = "ONLINE"


class PackagingType(str, Enum):
    """Packaging options with different carbon costs."""

    STANDARD = "STANDARD"
    ECO_FRIENDLY = "ECO_FRIENDLY"
    MINIMAL = "MINIMAL"
