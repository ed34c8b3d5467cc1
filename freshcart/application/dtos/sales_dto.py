"""Application DTOs for sales reports."""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, Field


class SalesReportDTO(BaseModel):
    """Revenue of one day split by channel and payment method."""

    date: dt.date = Field(..., description="Report day")
    total_orders: int = Field(..., ge=0, description="Confirmed or delivered orders")
    total_revenue: Decimal = Field(..., description="Sum of order totals")
    cash_sales: Decimal = Field(..., description="Register cash")
    card_sales: Decimal = Field(..., description="Register credit and debit cards")
    qr_sales: Decimal = Field(..., description="Register QR payments")
    online_sales: Decimal = Field(..., description="Online orders")

    model_config = {"frozen": True}
