"""Scheduled order endpoints for REST API."""

import logging
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Query, Response

from freshcart.application.dtos.scheduled_order_dto import (
    CreateScheduledOrderRequest,
    ExecutionHistoryDTO,
    ScheduledOrderDTO,
)
from freshcart.application.services import ScheduledOrderService
from freshcart.domain.enums import ScheduledOrderStatus
from freshcart.domain.value_objects import Identity

from apps.api.deps import get_scheduled_order_service
from apps.api.security import get_identity

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/scheduled-orders", tags=["scheduled-orders"])


@router.post("", response_model=ScheduledOrderDTO, status_code=201)
async def create_scheduled_order(
    request: CreateScheduledOrderRequest,
    identity: Identity = Depends(get_identity),
    service: ScheduledOrderService = Depends(get_scheduled_order_service),
) -> ScheduledOrderDTO:
    """Create a scheduled order owned by the caller.

    Args:
        request: Schedule definition
        identity: Calling user
        service: ScheduledOrderService instance

    Returns:
        ScheduledOrderDTO in PENDING status
    """
    return await service.create(request, identity)


@router.get("", response_model=List[ScheduledOrderDTO])
async def list_scheduled_orders(
    identity: Identity = Depends(get_identity),
    service: ScheduledOrderService = Depends(get_scheduled_order_service),
) -> List[ScheduledOrderDTO]:
    return await service.list_for_user(identity.user_id)


@router.get("/status/{status}", response_model=List[ScheduledOrderDTO])
async def list_by_status(
    status: ScheduledOrderStatus,
    identity: Identity = Depends(get_identity),
    service: ScheduledOrderService = Depends(get_scheduled_order_service),
) -> List[ScheduledOrderDTO]:
    return await service.list_by_status(identity.user_id, status)


@router.get("/date-range", response_model=List[ScheduledOrderDTO])
async def list_by_date_range(
    start_date: date = Query(...),
    end_date: date = Query(...),
    identity: Identity = Depends(get_identity),
    service: ScheduledOrderService = Depends(get_scheduled_order_service),
) -> List[ScheduledOrderDTO]:
    """Schedules with scheduled date in ``[start_date, end_date]``, earliest first."""
    return await service.list_by_date_range(identity.user_id, start_date, end_date)


@router.get("/{schedule_id}", response_model=ScheduledOrderDTO)
async def get_scheduled_order(
    schedule_id: int,
    identity: Identity = Depends(get_identity),
    service: ScheduledOrderService = Depends(get_scheduled_order_service),
) -> ScheduledOrderDTO:
    return await service.get(schedule_id, identity.user_id)


@router.put("/{schedule_id}", response_model=ScheduledOrderDTO)
async def update_scheduled_order(
    schedule_id: int,
    request: CreateScheduledOrderRequest,
    identity: Identity = Depends(get_identity),
    service: ScheduledOrderService = Depends(get_scheduled_order_service),
) -> ScheduledOrderDTO:
    """Replace a PENDING schedule's definition."""
    return await service.update(schedule_id, identity.user_id, request)


@router.delete("/{schedule_id}", status_code=204)
async def delete_scheduled_order(
    schedule_id: int,
    identity: Identity = Depends(get_identity),
    service: ScheduledOrderService = Depends(get_scheduled_order_service),
) -> Response:
    await service.delete(schedule_id, identity.user_id)
    return Response(status_code=204)


@router.put("/{schedule_id}/cancel", response_model=ScheduledOrderDTO)
async def cancel_scheduled_order(
    schedule_id: int,
    identity: Identity = Depends(get_identity),
    service: ScheduledOrderService = Depends(get_scheduled_order_service),
) -> ScheduledOrderDTO:
    return await service.cancel(schedule_id, identity.user_id)


@router.put("/{schedule_id}/pause", response_model=ScheduledOrderDTO)
async def pause_scheduled_order(
    schedule_id: int,
    identity: Identity = Depends(get_identity),
    service: ScheduledOrderService = Depends(get_scheduled_order_service),
) -> ScheduledOrderDTO:
    return await service.pause(schedule_id, identity.user_id)


@router.put("/{schedule_id}/resume", response_model=ScheduledOrderDTO)
async def resume_scheduled_order(
    schedule_id: int,
    identity: Identity = Depends(get_identity),
    service: ScheduledOrderService = Depends(get_scheduled_order_service),
) -> ScheduledOrderDTO:
    return await service.resume(schedule_id, identity.user_id)


@router.get("/{schedule_id}/history", response_model=List[ExecutionHistoryDTO])
async def execution_history(
    schedule_id: int,
    identity: Identity = Depends(get_identity),
    service: ScheduledOrderService = Depends(get_scheduled_order_service),
) -> List[ExecutionHistoryDTO]:
    """Scheduler attempts for the schedule, newest first."""
    return await service.execution_history(schedule_id, identity.user_id)
