"""Application DTOs for carbon footprint queries."""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from freshcart.domain.enums import PackagingType


class CarbonBreakdownDTO(BaseModel):
    product_footprint_kg: Decimal = Field(..., description="CO2 from products")
    delivery_footprint_kg: Decimal = Field(..., description="CO2 from delivery")
    packaging_footprint_kg: Decimal = Field(..., description="CO2 from packaging")

    model_config = {"frozen": True}


class CategoryFootprintDTO(BaseModel):
    category_name: str = Field(..., description="Inferred product category")
    carbon_footprint_kg: Decimal = Field(..., description="CO2 for the category")
    item_count: int = Field(..., ge=0, description="Items in the category")

    model_config = {"frozen": True}


class CarbonFootprintDTO(BaseModel):
    """Footprint of one order."""

    order_id: int = Field(..., description="Order id")
    carbon_footprint_kg: Decimal = Field(..., description="Total kg CO2")
    delivery_distance_km: Decimal = Field(..., description="Distance used")
    packaging_type: PackagingType = Field(..., description="Packaging used")
    breakdown: CarbonBreakdownDTO
    category_footprints: List[CategoryFootprintDTO] = Field(default_factory=list)

    model_config = {"frozen": True}


class MonthlyFootprintDTO(BaseModel):
    month: str = Field(..., description="YYYY-MM")
    carbon_kg: Decimal = Field(..., description="kg CO2 in the month")
    order_count: int = Field(..., ge=0, description="Orders in the month")

    model_config = {"frozen": True}


class UserCarbonSummaryDTO(BaseModel):
    """Aggregate footprint of a user's orders."""

    user_id: int
    total_orders: int = Field(..., ge=0)
    total_carbon_kg: Decimal
    average_carbon_per_order_kg: Decimal
    min_carbon_kg: Decimal
    max_carbon_kg: Decimal
    first_order_date: Optional[date] = None
    last_order_date: Optional[date] = None
    carbon_saved_kg: Decimal = Field(..., description="Compared to an average shopper")
    eco_badge: Optional[str] = None
    monthly_footprints: List[MonthlyFootprintDTO] = Field(default_factory=list)

    model_config = {"frozen": True}
