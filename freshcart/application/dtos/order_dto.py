"""Application DTOs for Order operations."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from freshcart.domain.enums import OrderStatus, PackagingType, PaymentMethod


class ShippingAddressDTO(BaseModel):
    """DTO for a delivery address."""

    street: str = Field(..., min_length=1, description="Street and house number")
    city: str = Field(..., min_length=1, description="City")
    state: Optional[str] = Field(None, description="State or region")
    zip_code: Optional[str] = Field(None, description="Postal code")
    country: Optional[str] = Field(None, description="Country")
    delivery_point: Optional[str] = Field(None, description="Pickup/delivery point label")

    model_config = {"frozen": True}


class OrderItemDTO(BaseModel):
    """DTO for order item."""

    id: Optional[int] = Field(None, description="Line id (responses only)")
    product_id: int = Field(..., description="Catalog product id")
    product_name: str = Field(..., min_length=1, description="Product name")
    price: Decimal = Field(..., ge=0, description="Unit price, or price per kg for weighted items")
    quantity: Optional[int] = Field(None, ge=1, description="Quantity ordered (defaults to 1)")
    weight: Optional[Decimal] = Field(None, gt=0, description="Weight in kg for weighted items")

    model_config = {"frozen": True}


class CreateOrderRequest(BaseModel):
    """Request DTO for creating an order."""

    user_id: int = Field(..., description="Owning user id")
    items: List[OrderItemDTO] = Field(..., min_length=1, description="Order items")
    shipping_address: Optional[ShippingAddressDTO] = Field(
        None, description="Delivery address (optional for point-of-sale orders)"
    )
    payment_method: Optional[PaymentMethod] = Field(None, description="Payment method")
    is_pos_order: bool = Field(default=False, description="Created at a store register")
    delivery_distance_km: Optional[Decimal] = Field(None, ge=0, description="Delivery distance")
    packaging_type: Optional[PackagingType] = Field(None, description="Packaging choice")

    model_config = {"frozen": True}


class UpdateOrderStatusRequest(BaseModel):
    """Request DTO for changing an order's status."""

    status: OrderStatus = Field(..., description="New status")

    model_config = {"frozen": True}


class OrderDTO(BaseModel):
    """Response DTO for order details."""

    id: int = Field(..., description="Order id")
    order_number: str = Field(..., description="Order number (ORD-XXXXXXXX)")
    user_id: int = Field(..., description="Owning user id")
    items: List[OrderItemDTO] = Field(default_factory=list, description="Order items")
    subtotal: Decimal = Field(..., ge=0, description="Sum of line amounts")
    tax_amount: Decimal = Field(..., ge=0, description="Tax amount")
    delivery_fee: Decimal = Field(..., ge=0, description="Delivery fee")
    total_amount: Decimal = Field(..., ge=0, description="Total order amount")
    status: OrderStatus = Field(..., description="Order status")
    payment_method: Optional[PaymentMethod] = Field(None, description="Payment method")
    is_pos_order: bool = Field(..., description="Created at a store register")
    shipping_address: Optional[ShippingAddressDTO] = Field(None, description="Delivery address")
    carbon_footprint_kg: Optional[Decimal] = Field(None, description="Estimated kg CO2")
    delivery_distance_km: Optional[Decimal] = Field(None, description="Delivery distance")
    packaging_type: Optional[PackagingType] = Field(None, description="Packaging choice")
    created_at: datetime = Field(..., description="Creation time")
    updated_at: datetime = Field(..., description="Last update time")

    model_config = {"frozen": True}


class CartItemDTO(BaseModel):
    """DTO for a cart line snapshot (reorder and scheduled orders)."""

    product_id: int = Field(..., description="Catalog product id")
    product_name: str = Field(..., min_length=1, description="Product name")
    price: Decimal = Field(..., ge=0, description="Unit price")
    quantity: Optional[int] = Field(None, ge=1, description="Quantity")
    weight: Optional[Decimal] = Field(None, gt=0, description="Weight in kg")

    model_config = {"frozen": True}


class FrequentProductDTO(BaseModel):
    """A product the user orders repeatedly."""

    product_id: int = Field(..., description="Catalog product id")
    product_name: str = Field(..., description="Most recent product name")
    times_ordered: int = Field(..., ge=2, description="Number of order lines with the product")
    average_price: Decimal = Field(..., description="Average unit price")
    average_quantity: Optional[int] = Field(None, description="Average quantity per order")
    average_weight: Optional[Decimal] = Field(None, description="Average weight per order")
    last_ordered_date: date = Field(..., description="Most recent order day")

    model_config = {"frozen": True}
