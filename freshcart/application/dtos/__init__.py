"""Application DTOs."""

from .carbon_dto import (
    CarbonBreakdownDTO,
    CarbonFootprintDTO,
    CategoryFootprintDTO,
    MonthlyFootprintDTO,
    UserCarbonSummaryDTO,
)
from .order_dto import (
    CartItemDTO,
    CreateOrderRequest,
    FrequentProductDTO,
    OrderDTO,
    OrderItemDTO,
    ShippingAddressDTO,
    UpdateOrderStatusRequest,
)
from .sales_dto import SalesReportDTO
from .scheduled_order_dto import (
    CreateScheduledOrderRequest,
    ExecutionHistoryDTO,
    ScheduledOrderDTO,
    ScheduledOrderItemDTO,
)

__all__ = [
    "CarbonBreakdownDTO",
    "CarbonFootprintDTO",
    "CartItemDTO",
    "CategoryFootprintDTO",
    "CreateOrderRequest",
    "CreateScheduledOrderRequest",
    "ExecutionHistoryDTO",
    "FrequentProductDTO",
    "MonthlyFootprintDTO",
    "OrderDTO",
    "OrderItemDTO",
    "SalesReportDTO",
    "ScheduledOrderDTO",
    "ScheduledOrderItemDTO",
    "ShippingAddressDTO",
    "UpdateOrderStatusRequest",
    "UserCarbonSummaryDTO",
]
