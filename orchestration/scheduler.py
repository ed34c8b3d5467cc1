"""Scheduled-order sweep - turns due schedules into real orders."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from freshcart.application.dtos.order_dto import (
    CreateOrderRequest,
    OrderDTO,
    OrderItemDTO,
    ShippingAddressDTO,
)
from freshcart.application.interfaces import IEventPublisher
from freshcart.application.services.order_service import OrderLifecycleService
from freshcart.data.uow import create_uow
from freshcart.domain.entities import ScheduledOrder
from freshcart.domain.enums import ExecutionOutcome, PaymentMethod
from freshcart.domain.events import ScheduledOrderExecutedEvent
from freshcart.infrastructure.locks import ScheduleLockRegistry
from freshcart.infrastructure.logging import get_logger


@dataclass
class SweepResult:
    """Outcome counts of one sweep."""

    due: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    order_ids: list[int] = field(default_factory=list)

    def record(self, outcome: Optional[ExecutionOutcome]) -> None:
        if outcome == ExecutionOutcome.SUCCESS:
            self.succeeded += 1
        elif outcome == ExecutionOutcome.FAILED:
            self.failed += 1
        else:
            self.skipped += 1


class ScheduledOrderScheduler:
    """
    Periodic sweep over due scheduled orders.

    Each schedule is processed under its lock: reload, claim by
    compare-and-swap on ``version`` with an execution lease, create the
    order, then record the outcome on a fresh copy of the schedule.
    A claim whose lease expired (crashed worker) can be taken over, so an
    occurrence is delivered at least once.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        order_service: OrderLifecycleService,
        locks: Optional[ScheduleLockRegistry] = None,
        event_publisher: Optional[IEventPublisher] = None,
        interval_seconds: float = 3600.0,
        claim_ttl_seconds: float = 900.0,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            session_factory: SQLAlchemy async session factory
            order_service: Materializes occurrences into orders
            locks: Lock registry shared with ScheduledOrderService
            event_publisher: Receives ``scheduled_order.executed`` events
            interval_seconds: Pause between sweeps in ``run_forever``
            claim_ttl_seconds: Lease duration of a claimed execution
            clock: Returns the current UTC time
        """
        self._session_factory = session_factory
        self._order_service = order_service
        self._locks = locks or ScheduleLockRegistry()
        self._publisher = event_publisher
        self._interval = interval_seconds
        self._claim_ttl = timedelta(seconds=claim_ttl_seconds)
        self._clock = clock or datetime.utcnow
        self._stop_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        self._logger = get_logger("orchestration.scheduler")

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    # =========================================================================
    # SWEEP
    # =========================================================================

    async def run_once(self, today: Optional[date] = None) -> SweepResult:
        """Process every schedule due on or before ``today``.

        Args:
            today: Reference date (defaults to the clock's date)

        Returns:
            SweepResult with per-outcome counts
        """
        today = today or self._clock().date()

        async with create_uow(self._session_factory) as uow:
            due = await uow.scheduled_orders.find_due(today)

        result = SweepResult(due=len(due))
        if not due:
            return result

        self._logger.info(f"Sweep {today}: {len(due)} scheduled order(s) due")

        for schedule in due:
            if self._stop_event.is_set():
                self._logger.info("Stop requested; leaving the rest for the next sweep")
                break
            try:
                outcome, order_id = await self.process(schedule.id, today)
            except Exception as exc:
                self._logger.error(
                    f"Scheduled order {schedule.id} could not be processed: {exc}",
                    exc_info=True,
                )
                outcome, order_id = ExecutionOutcome.FAILED, None

            result.record(outcome)
            if order_id is not None:
                result.order_ids.append(order_id)

        self._logger.info(
            f"Sweep {today} done: {result.succeeded} succeeded, "
            f"{result.failed} failed, {result.skipped} skipped"
        )
        return result

    async def process(
        self, schedule_id: int, today: date
    ) -> tuple[Optional[ExecutionOutcome], Optional[int]]:
        """Execute one schedule if it is still due.

        Returns:
            (outcome, created order id); the outcome is None when another
            worker holds the claim
        """
        async with self._locks.lock_for(schedule_id):
            claimed = await self._claim(schedule_id, today)
            if isinstance(claimed, ExecutionOutcome) or claimed is None:
                return claimed, None

            due_date = claimed.next_execution_date
            order: Optional[OrderDTO] = None
            error: Optional[str] = None
            try:
                order = await self._order_service.create_order(self._order_request(claimed))
            except Exception as exc:
                error = str(exc) or type(exc).__name__
                self._logger.error(
                    f"Scheduled order {schedule_id} failed to create an order: {error}",
                    exc_info=True,
                )

            schedule = await self._record_outcome(schedule_id, order, error, due_date)

        if order is None:
            return ExecutionOutcome.FAILED, None

        self._logger.info(
            f"Scheduled order {schedule_id} -> {order.order_number} "
            f"(occurrence {schedule.current_occurrence}, status {schedule.status.value})"
        )
        await self._publish_executed(schedule, order)
        return ExecutionOutcome.SUCCESS, order.id

    async def _claim(self, schedule_id: int, today: date):
        """Reload and claim a schedule.

        Returns:
            The claimed ScheduledOrder, SKIPPED when it is no longer eligible,
            or None when another worker holds it
        """
        now = self._clock()
        async with create_uow(self._session_factory) as uow:
            schedule = await uow.scheduled_orders.find_by_id(schedule_id)
            if schedule is None:
                return ExecutionOutcome.SKIPPED

            if not schedule.is_due(today):
                schedule.record_skip(
                    f"Not eligible on {today} (status {schedule.status.value}, "
                    f"next execution {schedule.next_execution_date})",
                    now,
                )
                await uow.scheduled_orders.save(schedule)
                await uow.commit()
                self._logger.info(f"Scheduled order {schedule_id} skipped: no longer due")
                return ExecutionOutcome.SKIPPED

            if schedule.is_claimed(now, self._claim_ttl):
                self._logger.info(f"Scheduled order {schedule_id} is claimed by another worker")
                return None

            if not await uow.scheduled_orders.try_claim(
                schedule_id, schedule.version, now, self._claim_ttl
            ):
                await uow.rollback()
                self._logger.info(f"Scheduled order {schedule_id} changed before claim")
                return None
            await uow.commit()

        return schedule

    async def _record_outcome(
        self,
        schedule_id: int,
        order: Optional[OrderDTO],
        error: Optional[str],
        due_date: date,
    ) -> ScheduledOrder:
        executed_at = self._clock()
        async with create_uow(self._session_factory) as uow:
            schedule = await uow.scheduled_orders.find_by_id(schedule_id, for_update=True)
            if order is not None:
                schedule.record_success(order.id, executed_at, due_date)
            else:
                schedule.record_failure(error or "unknown error", executed_at)
            await uow.scheduled_orders.save(schedule)
            await uow.commit()
        return schedule

    @staticmethod
    def _order_request(schedule: ScheduledOrder) -> CreateOrderRequest:
        """Order request built from the stored snapshots."""
        address = schedule.shipping_address
        return CreateOrderRequest(
            user_id=schedule.user_id,
            items=[
                OrderItemDTO(
                    product_id=item.product_id,
                    product_name=item.product_name,
                    price=item.price,
                    quantity=item.quantity,
                    weight=item.weight,
                )
                for item in schedule.cart_snapshot
            ],
            shipping_address=(
                ShippingAddressDTO(
                    street=address.street,
                    city=address.city,
                    state=address.state,
                    zip_code=address.zip_code,
                    country=address.country,
                    delivery_point=address.delivery_point or schedule.delivery_point,
                )
                if address is not None
                else None
            ),
            payment_method=PaymentMethod.ONLINE,
            is_pos_order=False,
        )

    async def _publish_executed(self, schedule: ScheduledOrder, order: OrderDTO) -> None:
        if self._publisher is None:
            return
        event = ScheduledOrderExecutedEvent(
            scheduled_order_id=schedule.id,
            order_number=order.order_number,
            occurrence=schedule.current_occurrence,
            schedule_status=schedule.status.value,
            user_id=schedule.user_id,
        )
        try:
            await self._publisher.publish(event.topic, event.to_dict())
        except Exception as exc:
            self._logger.error(f"Failed to publish {event.topic}: {exc}", exc_info=True)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def run_forever(self) -> None:
        """Sweep every ``interval_seconds`` until ``stop()``."""
        self._logger.info(f"Scheduler started (interval {self._interval}s)")
        while not self._stop_event.is_set():
            try:
                await self.run_once()
            except Exception as exc:
                self._logger.error(f"Sweep failed: {exc}", exc_info=True)

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                pass
        self._logger.info("Scheduler stopped")

    def start(self) -> None:
        """Launch ``run_forever`` as a background task."""
        if self.is_running:
            return
        self._stop_event.clear()
        self._task = asyncio.create_task(self.run_forever())

    async def stop(self) -> None:
        """Signal the loop to stop and wait for the in-flight schedule to finish."""
        self._stop_event.set()
        if self._task is not None:
            await self._task
            self._task = None
