"""Order endpoints for REST API."""

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from freshcart.application.dtos.carbon_dto import CarbonFootprintDTO, UserCarbonSummaryDTO
from freshcart.application.dtos.order_dto import (
    CartItemDTO,
    CreateOrderRequest,
    FrequentProductDTO,
    OrderDTO,
    UpdateOrderStatusRequest,
)
from freshcart.application.dtos.sales_dto import SalesReportDTO
from freshcart.application.services import (
    CarbonQueryService,
    OrderLifecycleService,
    SalesReportService,
)
from freshcart.domain.value_objects import Identity

from apps.api.deps import get_carbon_service, get_order_service, get_sales_report_service
from apps.api.security import ensure_can_act_for, get_identity, require_admin

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", response_model=OrderDTO, status_code=201)
async def create_order(
    request: CreateOrderRequest,
    identity: Identity = Depends(get_identity),
    service: OrderLifecycleService = Depends(get_order_service),
) -> OrderDTO:
    """Create a new order.

    Args:
        request: CreateOrderRequest DTO
        identity: Calling user (must be the order's user or an admin)
        service: OrderLifecycleService instance

    Returns:
        OrderDTO with created order details
    """
    return await service.create_order(request, identity)


@router.post("/pos", response_model=OrderDTO, status_code=201)
async def create_pos_order(
    request: CreateOrderRequest,
    identity: Identity = Depends(require_admin),
    service: OrderLifecycleService = Depends(get_order_service),
) -> OrderDTO:
    """Create a point-of-sale order (admin only)."""
    return await service.create_pos_order(request, identity)


# =============================================================================
# ADMIN / REPORTS
# =============================================================================

@router.get("/admin/all", response_model=List[OrderDTO])
async def list_all_orders(
    is_pos_order: Optional[bool] = Query(None, description="Only register or only online orders"),
    _: Identity = Depends(require_admin),
    service: OrderLifecycleService = Depends(get_order_service),
) -> List[OrderDTO]:
    return await service.list_all_orders(is_pos_order=is_pos_order)


@router.get("/sales/daily", response_model=SalesReportDTO)
async def daily_sales(
    day: Optional[date] = Query(None, alias="date", description="Report day (default today)"),
    _: Identity = Depends(require_admin),
    service: SalesReportService = Depends(get_sales_report_service),
) -> SalesReportDTO:
    return await service.daily_report(day or date.today())


@router.get("/sales/monthly", response_model=List[SalesReportDTO])
async def monthly_sales(
    year: int = Query(..., ge=1970, le=9999),
    month: int = Query(...),
    _: Identity = Depends(require_admin),
    service: SalesReportService = Depends(get_sales_report_service),
) -> List[SalesReportDTO]:
    """Daily reports for the days of a month that have orders."""
    return await service.monthly_report(year, month)


# =============================================================================
# LOOKUPS
# =============================================================================

@router.get("/number/{order_number}", response_model=OrderDTO)
async def get_order_by_number(
    order_number: str,
    identity: Identity = Depends(get_identity),
    service: OrderLifecycleService = Depends(get_order_service),
) -> OrderDTO:
    order = await service.get_order_by_number(order_number)
    ensure_can_act_for(identity, order.user_id)
    return order


@router.get("/user/{user_id}", response_model=List[OrderDTO])
async def list_user_orders(
    user_id: int,
    identity: Identity = Depends(get_identity),
    service: OrderLifecycleService = Depends(get_order_service),
) -> List[OrderDTO]:
    """List a user's orders, newest first."""
    ensure_can_act_for(identity, user_id)
    return await service.list_user_orders(user_id)


@router.get("/user/{user_id}/frequently-ordered", response_model=List[FrequentProductDTO])
async def frequently_ordered(
    user_id: int,
    identity: Identity = Depends(get_identity),
    service: OrderLifecycleService = Depends(get_order_service),
) -> List[FrequentProductDTO]:
    ensure_can_act_for(identity, user_id)
    return await service.get_frequently_ordered_products(user_id)


@router.get("/user/{user_id}/carbon-summary", response_model=UserCarbonSummaryDTO)
async def carbon_summary(
    user_id: int,
    identity: Identity = Depends(get_identity),
    service: CarbonQueryService = Depends(get_carbon_service),
) -> UserCarbonSummaryDTO:
    ensure_can_act_for(identity, user_id)
    return await service.get_user_summary(user_id)


@router.get("/{order_id}", response_model=OrderDTO)
async def get_order(
    order_id: int,
    identity: Identity = Depends(get_identity),
    service: OrderLifecycleService = Depends(get_order_service),
) -> OrderDTO:
    """Get order by ID.

    Args:
        order_id: Order id
        identity: Calling user
        service: OrderLifecycleService instance

    Returns:
        OrderDTO with order details
    """
    order = await service.get_order(order_id)
    ensure_can_act_for(identity, order.user_id)
    return order


@router.put("/{order_id}/status", response_model=OrderDTO)
async def update_order_status(
    order_id: int,
    request: UpdateOrderStatusRequest,
    _: Identity = Depends(require_admin),
    service: OrderLifecycleService = Depends(get_order_service),
) -> OrderDTO:
    """Move an order to a new status (admin only)."""
    return await service.update_order_status(order_id, request.status)


@router.get("/{order_id}/reorder-items", response_model=List[CartItemDTO])
async def reorder_items(
    order_id: int,
    user_id: int = Query(..., description="Owner of the order"),
    identity: Identity = Depends(get_identity),
    service: OrderLifecycleService = Depends(get_order_service),
) -> List[CartItemDTO]:
    ensure_can_act_for(identity, user_id)
    return await service.get_reorder_items(order_id, user_id)


@router.get("/{order_id}/carbon-footprint", response_model=CarbonFootprintDTO)
async def order_carbon_footprint(
    order_id: int,
    identity: Identity = Depends(get_identity),
    orders: OrderLifecycleService = Depends(get_order_service),
    carbon: CarbonQueryService = Depends(get_carbon_service),
) -> CarbonFootprintDTO:
    order = await orders.get_order(order_id)
    ensure_can_act_for(identity, order.user_id)
    return await carbon.get_order_footprint(order_id)
