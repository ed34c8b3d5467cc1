"""Application service for user-managed scheduled orders."""

import logging
from datetime import date, datetime
from typing import Awaitable, Callable, List, Optional, Tuple, TypeVar

from sqlalchemy.ext.asyncio import async_sessionmaker

from freshcart.application.dtos.order_dto import ShippingAddressDTO
from freshcart.application.dtos.scheduled_order_dto import (
    CreateScheduledOrderRequest,
    ExecutionHistoryDTO,
    ScheduledOrderDTO,
    ScheduledOrderItemDTO,
)
from freshcart.data.uow import UnitOfWork, create_uow
from freshcart.domain.entities import ScheduledOrder, ScheduledOrderLine
from freshcart.domain.enums import OrderType, ScheduledOrderStatus
from freshcart.domain.exceptions import (
    ConcurrentModificationError,
    NotFoundError,
    ValidationError,
)
from freshcart.domain.services.pricing import PricingCalculator
from freshcart.domain.services.recurrence import initial_execution_date
from freshcart.domain.value_objects import (
    CartItemSnapshot,
    Identity,
    ShippingAddress,
    round_half_up,
)
from freshcart.infrastructure.locks import ScheduleLockRegistry

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Attempts of a user action that keeps losing the version race
MAX_CONFLICT_ATTEMPTS = 3


class ScheduledOrderService:
    """
    Application service for scheduled and recurring orders.

    Every mutation runs under the schedule's lock and bumps its version,
    so it serializes with the scheduler sweep.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        pricing: Optional[PricingCalculator] = None,
        locks: Optional[ScheduleLockRegistry] = None,
    ) -> None:
        """Initialize scheduled order service.

        Args:
            session_factory: SQLAlchemy async session factory
            pricing: Used to materialize line subtotals
            locks: Lock registry shared with the scheduler
        """
        self._session_factory = session_factory
        self._pricing = pricing or PricingCalculator()
        self._locks = locks or ScheduleLockRegistry()

    # =========================================================================
    # COMMANDS
    # =========================================================================

    async def create(
        self, request: CreateScheduledOrderRequest, identity: Identity
    ) -> ScheduledOrderDTO:
        """Create a scheduled order for the calling user.

        Args:
            request: Schedule definition with cart snapshot and address
            identity: Calling user (becomes the owner)

        Returns:
            ScheduledOrderDTO in PENDING status

        Raises:
            ValidationError: If recurrence, items or address are missing
        """
        self._validate(request)

        schedule = ScheduledOrder(
            user_id=identity.user_id,
            order_name=request.order_name,
            order_type=request.order_type,
            scheduled_date=request.scheduled_date,
            next_execution_date=request.scheduled_date,
        )
        self._apply_request(schedule, request)

        async with create_uow(self._session_factory) as uow:
            await uow.scheduled_orders.add(schedule)
            await uow.commit()

        logger.info(
            f"Scheduled order {schedule.id} created for user {schedule.user_id} "
            f"({schedule.order_type.value}, next={schedule.next_execution_date})"
        )
        return self._to_dto(schedule)

    async def update(
        self, schedule_id: int, user_id: int, request: CreateScheduledOrderRequest
    ) -> ScheduledOrderDTO:
        """Replace the definition of a PENDING schedule.

        Raises:
            NotFoundError: Unknown schedule or owned by another user
            PolicyViolationError: Schedule is no longer PENDING
        """
        self._validate(request)

        async def apply(uow: UnitOfWork) -> ScheduledOrder:
            schedule = await self._load_owned(uow, schedule_id, user_id, for_update=True)
            schedule.ensure_updatable()
            self._apply_request(schedule, request)
            await uow.scheduled_orders.save(schedule)
            return schedule

        schedule = await self._run_locked(schedule_id, apply)
        logger.info(f"Scheduled order {schedule_id} updated")
        return self._to_dto(schedule)

    async def cancel(self, schedule_id: int, user_id: int) -> ScheduledOrderDTO:
        return await self._transition(schedule_id, user_id, ScheduledOrder.cancel)

    async def pause(self, schedule_id: int, user_id: int) -> ScheduledOrderDTO:
        return await self._transition(schedule_id, user_id, ScheduledOrder.pause)

    async def resume(self, schedule_id: int, user_id: int) -> ScheduledOrderDTO:
        return await self._transition(schedule_id, user_id, ScheduledOrder.resume)

    async def delete(self, schedule_id: int, user_id: int) -> None:
        """Delete a PENDING or CANCELLED schedule with its lines and history."""

        async def apply(uow: UnitOfWork) -> None:
            schedule = await self._load_owned(uow, schedule_id, user_id, for_update=True)
            schedule.ensure_deletable()
            await uow.scheduled_orders.delete(schedule)

        await self._run_locked(schedule_id, apply)
        logger.info(f"Scheduled order {schedule_id} deleted")

    # =========================================================================
    # QUERIES
    # =========================================================================

    async def get(self, schedule_id: int, user_id: int) -> ScheduledOrderDTO:
        async with create_uow(self._session_factory) as uow:
            schedule = await self._load_owned(uow, schedule_id, user_id)
        return self._to_dto(schedule)

    async def list_for_user(self, user_id: int) -> List[ScheduledOrderDTO]:
        """List the user's schedules, latest scheduled date first."""
        async with create_uow(self._session_factory) as uow:
            schedules = await uow.scheduled_orders.find_by_user(user_id)
        return [self._to_dto(schedule) for schedule in schedules]

    async def list_by_status(
        self, user_id: int, status: ScheduledOrderStatus
    ) -> List[ScheduledOrderDTO]:
        async with create_uow(self._session_factory) as uow:
            schedules = await uow.scheduled_orders.find_by_user_and_status(user_id, status)
        return [self._to_dto(schedule) for schedule in schedules]

    async def list_by_date_range(
        self, user_id: int, start: date, end: date
    ) -> List[ScheduledOrderDTO]:
        """List the user's schedules with scheduled date in ``[start, end]``.

        Raises:
            ValidationError: If ``start`` is after ``end``
        """
        if start > end:
            raise ValidationError("start_date must not be after end_date")
        async with create_uow(self._session_factory) as uow:
            schedules = await uow.scheduled_orders.find_by_user_and_date_range(user_id, start, end)
        return [self._to_dto(schedule) for schedule in schedules]

    async def execution_history(self, schedule_id: int, user_id: int) -> List[ExecutionHistoryDTO]:
        """Audit trail of the scheduler attempts, newest first."""
        async with create_uow(self._session_factory) as uow:
            await self._load_owned(uow, schedule_id, user_id)
            history = await uow.scheduled_orders.find_history(schedule_id)

        return [
            ExecutionHistoryDTO(
                id=record.id,
                scheduled_order_id=record.scheduled_order_id,
                executed_order_id=record.executed_order_id,
                execution_date=record.execution_date,
                status=record.status,
                error_message=record.error_message,
            )
            for record in history
        ]

    # =========================================================================
    # HELPERS
    # =========================================================================

    async def _transition(self, schedule_id: int, user_id: int, action) -> ScheduledOrderDTO:
        async def apply(uow: UnitOfWork) -> Tuple[ScheduledOrder, ScheduledOrderStatus]:
            schedule = await self._load_owned(uow, schedule_id, user_id, for_update=True)
            previous = schedule.status
            action(schedule)
            await uow.scheduled_orders.save(schedule)
            return schedule, previous

        schedule, previous = await self._run_locked(schedule_id, apply)
        logger.info(
            f"Scheduled order {schedule_id}: {previous.value} -> {schedule.status.value}"
        )
        return self._to_dto(schedule)

    async def _run_locked(
        self, schedule_id: int, operation: Callable[[UnitOfWork], Awaitable[T]]
    ) -> T:
        """Run ``operation`` in its own unit of work under the schedule's lock.

        A version conflict with a writer outside this process reloads the
        schedule and runs the operation again, so the user action is applied
        on top of the latest state.
        """
        async with self._locks.lock_for(schedule_id):
            for attempt in range(1, MAX_CONFLICT_ATTEMPTS + 1):
                try:
                    async with create_uow(self._session_factory) as uow:
                        result = await operation(uow)
                        await uow.commit()
                    return result
                except ConcurrentModificationError:
                    if attempt == MAX_CONFLICT_ATTEMPTS:
                        raise
                    logger.warning(
                        f"Scheduled order {schedule_id} changed concurrently, "
                        f"retrying ({attempt}/{MAX_CONFLICT_ATTEMPTS})"
                    )

    @staticmethod
    async def _load_owned(
        uow: UnitOfWork, schedule_id: int, user_id: int, for_update: bool = False
    ) -> ScheduledOrder:
        schedule = await uow.scheduled_orders.find_by_id(schedule_id, for_update=for_update)
        if schedule is None or schedule.user_id != user_id:
            raise NotFoundError("Scheduled order", schedule_id)
        return schedule

    @staticmethod
    def _validate(request: CreateScheduledOrderRequest) -> None:
        if request.order_type == OrderType.RECURRING and request.recurrence_type is None:
            raise ValidationError("Recurrence type is required for recurring orders")
        if not request.items:
            raise ValidationError("Scheduled order items are required")
        if request.shipping_address is None:
            raise ValidationError("Shipping address is required")
        if request.end_date is not None:
            first_execution = initial_execution_date(
                request.scheduled_date, request.order_type, request.recurrence_type
            )
            if request.end_date < first_execution:
                raise ValidationError(
                    f"end_date {request.end_date} is before the first execution "
                    f"date {first_execution}"
                )

    def _apply_request(
        self, schedule: ScheduledOrder, request: CreateScheduledOrderRequest
    ) -> None:
        """Copy a request onto a schedule and recompute derived fields."""
        address = request.shipping_address
        schedule.order_name = request.order_name
        schedule.order_type = request.order_type
        schedule.recurrence_type = (
            request.recurrence_type if request.order_type == OrderType.RECURRING else None
        )
        schedule.scheduled_date = request.scheduled_date
        schedule.scheduled_time = request.scheduled_time
        schedule.delivery_date = request.delivery_date or request.scheduled_date
        schedule.delivery_time = request.delivery_time or request.scheduled_time
        schedule.end_date = request.end_date
        schedule.max_occurrences = request.max_occurrences
        schedule.shipping_address = ShippingAddress(
            street=address.street,
            city=address.city,
            state=address.state,
            zip_code=address.zip_code,
            country=address.country,
            delivery_point=address.delivery_point,
        )
        schedule.delivery_point = request.delivery_point or address.delivery_point
        schedule.notes = request.notes
        schedule.cart_snapshot = [
            CartItemSnapshot(
                product_id=item.product_id,
                product_name=item.product_name,
                price=item.price,
                quantity=item.quantity,
                weight=item.weight,
            )
            for item in request.items
        ]
        schedule.lines = [
            ScheduledOrderLine(
                product_id=item.product_id,
                product_name=item.product_name,
                price=item.price,
                quantity=item.quantity,
                weight=item.weight,
                subtotal=round_half_up(self._pricing.line_subtotal(item)),
            )
            for item in request.items
        ]
        schedule.next_execution_date = initial_execution_date(
            request.scheduled_date, request.order_type, request.recurrence_type
        )
        schedule.updated_at = datetime.utcnow()

    @staticmethod
    def _to_dto(schedule: ScheduledOrder) -> ScheduledOrderDTO:
        """Transform ScheduledOrder domain entity to ScheduledOrderDTO."""
        address = schedule.shipping_address
        return ScheduledOrderDTO(
            id=schedule.id,
            user_id=schedule.user_id,
            order_name=schedule.order_name,
            order_type=schedule.order_type,
            recurrence_type=schedule.recurrence_type,
            scheduled_date=schedule.scheduled_date,
            scheduled_time=schedule.scheduled_time,
            delivery_date=schedule.delivery_date,
            delivery_time=schedule.delivery_time,
            status=schedule.status,
            next_execution_date=schedule.next_execution_date,
            end_date=schedule.end_date,
            max_occurrences=schedule.max_occurrences,
            current_occurrence=schedule.current_occurrence,
            items=[
                ScheduledOrderItemDTO(
                    id=line.id,
                    product_id=line.product_id,
                    product_name=line.product_name,
                    price=line.price,
                    quantity=line.quantity,
                    weight=line.weight,
                    subtotal=line.subtotal,
                )
                for line in schedule.lines
            ],
            shipping_address=(
                ShippingAddressDTO(
                    street=address.street,
                    city=address.city,
                    state=address.state,
                    zip_code=address.zip_code,
                    country=address.country,
                    delivery_point=address.delivery_point,
                )
                if address is not None
                else None
            ),
            delivery_point=schedule.delivery_point,
            notes=schedule.notes,
            created_at=schedule.created_at,
            updated_at=schedule.updated_at,
        )
