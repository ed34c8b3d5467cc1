"""Carbon footprint history record."""
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class CarbonFootprintHistory:
    """
    Append-only footprint record for one order.

    ``order_id`` is a lookup reference only; history outlives the order.
    """
    user_id: int
    order_id: int
    carbon_footprint_kg: Decimal
    order_date: date
    id: Optional[int] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
