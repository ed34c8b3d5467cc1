"""Application DTOs for scheduled orders."""

from datetime import date, datetime, time
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from freshcart.domain.enums import (
    ExecutionOutcome,
    OrderType,
    RecurrenceType,
    ScheduledOrderStatus,
)

from .order_dto import CartItemDTO, ShippingAddressDTO


class CreateScheduledOrderRequest(BaseModel):
    """Request DTO for creating or updating a scheduled order."""

    order_name: str = Field(..., min_length=1, description="Display name")
    order_type: OrderType = Field(..., description="ONE_TIME or RECURRING")
    recurrence_type: Optional[RecurrenceType] = Field(
        None, description="Required for RECURRING orders"
    )
    scheduled_date: date = Field(..., description="Anchor date")
    scheduled_time: Optional[time] = Field(None, description="Preferred time")
    delivery_date: Optional[date] = Field(None, description="Defaults to scheduled date")
    delivery_time: Optional[time] = Field(None, description="Defaults to scheduled time")
    end_date: Optional[date] = Field(None, description="Last allowed execution date")
    max_occurrences: Optional[int] = Field(None, ge=1, description="Maximum executions")
    items: List[CartItemDTO] = Field(default_factory=list, description="Cart snapshot")
    shipping_address: Optional[ShippingAddressDTO] = Field(None, description="Delivery address")
    delivery_point: Optional[str] = Field(None, description="Delivery point label")
    notes: Optional[str] = Field(None, description="Free-form notes")

    model_config = {"frozen": True}


class ScheduledOrderItemDTO(BaseModel):
    """Scheduled order line with its materialized subtotal."""

    id: Optional[int] = Field(None, description="Line id")
    product_id: int = Field(..., description="Catalog product id")
    product_name: str = Field(..., description="Product name")
    price: Decimal = Field(..., description="Unit price")
    quantity: Optional[int] = Field(None, description="Quantity")
    weight: Optional[Decimal] = Field(None, description="Weight in kg")
    subtotal: Decimal = Field(..., description="Line amount")

    model_config = {"frozen": True}


class ScheduledOrderDTO(BaseModel):
    """Response DTO for scheduled order details."""

    id: int = Field(..., description="Scheduled order id")
    user_id: int = Field(..., description="Owning user id")
    order_name: str = Field(..., description="Display name")
    order_type: OrderType = Field(..., description="ONE_TIME or RECURRING")
    recurrence_type: Optional[RecurrenceType] = Field(None, description="Recurrence period")
    scheduled_date: date = Field(..., description="Anchor date")
    scheduled_time: Optional[time] = Field(None, description="Preferred time")
    delivery_date: Optional[date] = Field(None, description="Delivery date")
    delivery_time: Optional[time] = Field(None, description="Delivery time")
    status: ScheduledOrderStatus = Field(..., description="Schedule status")
    next_execution_date: Optional[date] = Field(None, description="Next sweep date")
    end_date: Optional[date] = Field(None, description="Last allowed execution date")
    max_occurrences: Optional[int] = Field(None, description="Maximum executions")
    current_occurrence: int = Field(..., ge=0, description="Executions so far")
    items: List[ScheduledOrderItemDTO] = Field(default_factory=list, description="Lines")
    shipping_address: Optional[ShippingAddressDTO] = Field(None, description="Delivery address")
    delivery_point: Optional[str] = Field(None, description="Delivery point label")
    notes: Optional[str] = Field(None, description="Notes")
    created_at: datetime = Field(..., description="Creation time")
    updated_at: datetime = Field(..., description="Last update time")

    model_config = {"frozen": True}


class ExecutionHistoryDTO(BaseModel):
    """One scheduler attempt."""

    id: Optional[int] = Field(None, description="History id")
    scheduled_order_id: Optional[int] = Field(None, description="Scheduled order id")
    executed_order_id: Optional[int] = Field(None, description="Created order id")
    execution_date: datetime = Field(..., description="Attempt time")
    status: ExecutionOutcome = Field(..., description="SUCCESS, FAILED or SKIPPED")
    error_message: Optional[str] = Field(None, description="Failure or skip reason")

    model_config = {"frozen": True}
