"""
Tests for ScheduledOrderScheduler.

Each sweep runs against in-memory SQLite with an explicit ``today`` so
recurring schedules can be driven through several periods.
"""
import asyncio
from datetime import date, datetime, timedelta

import pytest

from freshcart.application.services import ScheduledOrderService
from freshcart.data.uow import create_uow
from freshcart.domain.enums import (
    ExecutionOutcome,
    OrderStatus,
    OrderType,
    PaymentMethod,
    RecurrenceType,
    ScheduledOrderStatus,
)
from freshcart.infrastructure.locks import ScheduleLockRegistry
from orchestration.scheduler import ScheduledOrderScheduler

from tests.mocks.builders import CUSTOMER, schedule_request


class FailingOrderService:
    """Order service whose order creation always fails."""

    def __init__(self):
        self.attempts = 0

    async def create_order(self, request, identity=None):
        self.attempts += 1
        raise RuntimeError("catalog unavailable")


class InterruptingOrderService:
    """Runs a user action on the schedule before delegating order creation."""

    def __init__(self, delegate, action):
        self._delegate = delegate
        self._action = action

    async def create_order(self, request, identity=None):
        await self._action()
        return await self._delegate.create_order(request, identity)


class SweepingScheduledOrderService(ScheduledOrderService):
    """Lets another worker sweep right after the first load of a user action."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.on_first_load = None
        self.loads = 0

    async def _load_owned(self, uow, schedule_id, user_id, for_update=False):
        schedule = await super()._load_owned(uow, schedule_id, user_id, for_update=for_update)
        self.loads += 1
        if self.on_first_load is not None:
            hook, self.on_first_load = self.on_first_load, None
            await hook()
        return schedule


@pytest.fixture
def scheduler(test_session_factory, order_service, schedule_locks, publisher) -> ScheduledOrderScheduler:
    return ScheduledOrderScheduler(
        test_session_factory,
        order_service,
        locks=schedule_locks,
        event_publisher=publisher,
        interval_seconds=3600,
        claim_ttl_seconds=900,
    )


async def _set_claim(session_factory, schedule_id: int, claimed_at: datetime) -> None:
    async with create_uow(session_factory) as uow:
        schedule = await uow.scheduled_orders.find_by_id(schedule_id)
        schedule.claimed_at = claimed_at
        await uow.scheduled_orders.save(schedule)
        await uow.commit()


@pytest.mark.asyncio
async def test_one_time_schedule_runs_once(scheduler, scheduled_order_service, order_service, publisher):
    schedule = await scheduled_order_service.create(schedule_request(scheduled_date=date(2024, 3, 1)), CUSTOMER)

    result = await scheduler.run_once(today=date(2024, 3, 1))

    assert result.due == 1
    assert result.succeeded == 1
    assert len(result.order_ids) == 1

    stored = await scheduled_order_service.get(schedule.id, CUSTOMER.user_id)
    assert stored.status == ScheduledOrderStatus.COMPLETED
    assert stored.current_occurrence == 1

    history = await scheduled_order_service.execution_history(schedule.id, CUSTOMER.user_id)
    assert [record.status for record in history] == [ExecutionOutcome.SUCCESS]
    assert history[0].executed_order_id == result.order_ids[0]

    order = await order_service.get_order(result.order_ids[0])
    assert order.user_id == CUSTOMER.user_id
    assert order.status == OrderStatus.PENDING
    assert order.payment_method == PaymentMethod.ONLINE
    assert order.is_pos_order is False
    assert sorted(item.product_id for item in order.items) == [1, 3]

    executed = publisher.payloads("scheduled_order.executed")
    assert len(executed) == 1
    assert executed[0]["data"]["occurrence"] == 1
    assert executed[0]["data"]["schedule_status"] == "COMPLETED"

    again = await scheduler.run_once(today=date(2024, 3, 1))
    assert again.due == 0


@pytest.mark.asyncio
async def test_schedule_not_due_before_its_date(scheduler, scheduled_order_service):
    await scheduled_order_service.create(schedule_request(scheduled_date=date(2024, 3, 1)), CUSTOMER)

    result = await scheduler.run_once(today=date(2024, 2, 29))

    assert result.due == 0
    assert result.order_ids == []


@pytest.mark.asyncio
async def test_recurring_schedule_completes_after_max_occurrences(scheduler, scheduled_order_service):
    schedule = await scheduled_order_service.create(
        schedule_request(OrderType.RECURRING, RecurrenceType.WEEKLY, date(2024, 1, 1), max_occurrences=3),
        CUSTOMER,
    )

    expectations = [
        (date(2024, 1, 8), ScheduledOrderStatus.ACTIVE, date(2024, 1, 15)),
        (date(2024, 1, 15), ScheduledOrderStatus.ACTIVE, date(2024, 1, 22)),
        (date(2024, 1, 22), ScheduledOrderStatus.COMPLETED, date(2024, 1, 22)),
    ]
    order_ids = []
    for occurrence, (today, status, next_date) in enumerate(expectations, start=1):
        result = await scheduler.run_once(today=today)
        order_ids.extend(result.order_ids)

        stored = await scheduled_order_service.get(schedule.id, CUSTOMER.user_id)
        assert stored.current_occurrence == occurrence
        assert stored.status == status, f"after occurrence {occurrence}"
        assert stored.next_execution_date == next_date

    assert len(set(order_ids)) == 3
    assert (await scheduler.run_once(today=date(2024, 2, 1))).due == 0


@pytest.mark.asyncio
async def test_one_occurrence_per_sweep(scheduler, scheduled_order_service):
    """A schedule that fell behind catches up one period per sweep."""
    schedule = await scheduled_order_service.create(
        schedule_request(OrderType.RECURRING, RecurrenceType.DAILY, date(2024, 1, 1)), CUSTOMER
    )

    result = await scheduler.run_once(today=date(2024, 1, 10))

    assert result.succeeded == 1
    stored = await scheduled_order_service.get(schedule.id, CUSTOMER.user_id)
    assert stored.next_execution_date == date(2024, 1, 3)


@pytest.mark.asyncio
async def test_paused_schedule_is_excluded(scheduler, scheduled_order_service):
    schedule = await scheduled_order_service.create(
        schedule_request(OrderType.RECURRING, RecurrenceType.WEEKLY, date(2024, 1, 1)), CUSTOMER
    )
    await scheduler.run_once(today=date(2024, 1, 8))
    await scheduled_order_service.pause(schedule.id, CUSTOMER.user_id)

    paused_sweep = await scheduler.run_once(today=date(2024, 1, 15))
    await scheduled_order_service.resume(schedule.id, CUSTOMER.user_id)
    resumed_sweep = await scheduler.run_once(today=date(2024, 1, 15))

    assert paused_sweep.due == 0
    assert resumed_sweep.succeeded == 1


@pytest.mark.asyncio
async def test_failure_is_recorded_and_retried(
    test_session_factory, scheduler, scheduled_order_service, schedule_locks
):
    schedule = await scheduled_order_service.create(schedule_request(scheduled_date=date(2024, 3, 1)), CUSTOMER)
    failing = FailingOrderService()
    broken_scheduler = ScheduledOrderScheduler(test_session_factory, failing, locks=schedule_locks)

    failed = await broken_scheduler.run_once(today=date(2024, 3, 1))

    assert failed.failed == 1
    assert failing.attempts == 1
    stored = await scheduled_order_service.get(schedule.id, CUSTOMER.user_id)
    assert stored.status == ScheduledOrderStatus.PENDING
    assert stored.next_execution_date == date(2024, 3, 1)
    assert stored.current_occurrence == 0

    # Next sweep with a working order service picks it up again
    retried = await scheduler.run_once(today=date(2024, 3, 1))

    assert retried.succeeded == 1
    history = await scheduled_order_service.execution_history(schedule.id, CUSTOMER.user_id)
    assert [record.status for record in history] == [ExecutionOutcome.SUCCESS, ExecutionOutcome.FAILED]
    assert history[1].error_message == "catalog unavailable"


@pytest.mark.asyncio
async def test_claimed_schedule_is_left_alone(test_session_factory, scheduler, scheduled_order_service):
    schedule = await scheduled_order_service.create(schedule_request(scheduled_date=date(2024, 3, 1)), CUSTOMER)
    await _set_claim(test_session_factory, schedule.id, datetime.utcnow() - timedelta(minutes=1))

    result = await scheduler.run_once(today=date(2024, 3, 1))

    assert result.due == 1
    assert result.succeeded == 0
    assert result.order_ids == []
    stored = await scheduled_order_service.get(schedule.id, CUSTOMER.user_id)
    assert stored.status == ScheduledOrderStatus.PENDING


@pytest.mark.asyncio
async def test_expired_claim_is_taken_over(test_session_factory, scheduler, scheduled_order_service):
    schedule = await scheduled_order_service.create(schedule_request(scheduled_date=date(2024, 3, 1)), CUSTOMER)
    await _set_claim(test_session_factory, schedule.id, datetime.utcnow() - timedelta(hours=1))

    result = await scheduler.run_once(today=date(2024, 3, 1))

    assert result.succeeded == 1
    stored = await scheduled_order_service.get(schedule.id, CUSTOMER.user_id)
    assert stored.status == ScheduledOrderStatus.COMPLETED


@pytest.mark.asyncio
async def test_schedule_cancelled_before_processing_is_skipped(scheduler, scheduled_order_service):
    schedule = await scheduled_order_service.create(schedule_request(scheduled_date=date(2024, 3, 1)), CUSTOMER)
    await scheduled_order_service.cancel(schedule.id, CUSTOMER.user_id)

    outcome, order_id = await scheduler.process(schedule.id, date(2024, 3, 1))

    assert outcome == ExecutionOutcome.SKIPPED
    assert order_id is None
    history = await scheduled_order_service.execution_history(schedule.id, CUSTOMER.user_id)
    assert [record.status for record in history] == [ExecutionOutcome.SKIPPED]


@pytest.mark.asyncio
async def test_concurrent_processing_creates_one_order(scheduler, scheduled_order_service):
    schedule = await scheduled_order_service.create(schedule_request(scheduled_date=date(2024, 3, 1)), CUSTOMER)

    outcomes = await asyncio.gather(
        scheduler.process(schedule.id, date(2024, 3, 1)),
        scheduler.process(schedule.id, date(2024, 3, 1)),
    )

    assert sorted(outcome.value for outcome, _ in outcomes) == ["SKIPPED", "SUCCESS"]
    assert len([order_id for _, order_id in outcomes if order_id is not None]) == 1


@pytest.mark.asyncio
async def test_schedule_ending_on_its_first_run_executes_once(scheduler, scheduled_order_service):
    schedule = await scheduled_order_service.create(
        schedule_request(OrderType.RECURRING, RecurrenceType.DAILY, date(2024, 1, 1), end_date=date(2024, 1, 2)),
        CUSTOMER,
    )

    result = await scheduler.run_once(today=date(2024, 1, 2))

    assert result.succeeded == 1
    stored = await scheduled_order_service.get(schedule.id, CUSTOMER.user_id)
    assert stored.status == ScheduledOrderStatus.COMPLETED
    assert stored.current_occurrence == 1
    assert (await scheduler.run_once(today=date(2024, 1, 3))).due == 0


# =============================================================================
# USER ACTIONS RACING AN EXECUTION
# =============================================================================

@pytest.mark.parametrize(
    "action,expected",
    [("pause", ScheduledOrderStatus.PAUSED), ("cancel", ScheduledOrderStatus.CANCELLED)],
)
@pytest.mark.asyncio
async def test_status_set_during_execution_is_kept(
    test_session_factory, scheduler, scheduled_order_service, order_service, action, expected
):
    schedule = await scheduled_order_service.create(
        schedule_request(OrderType.RECURRING, RecurrenceType.WEEKLY, date(2024, 1, 1)), CUSTOMER
    )
    await scheduler.run_once(today=date(2024, 1, 8))

    # Another process, so it does not share this process's schedule locks
    remote_service = ScheduledOrderService(test_session_factory, locks=ScheduleLockRegistry())
    interrupted = ScheduledOrderScheduler(
        test_session_factory,
        InterruptingOrderService(
            order_service,
            lambda: getattr(remote_service, action)(schedule.id, CUSTOMER.user_id),
        ),
        locks=ScheduleLockRegistry(),
    )

    outcome, order_id = await interrupted.process(schedule.id, date(2024, 1, 15))

    assert outcome == ExecutionOutcome.SUCCESS
    assert order_id is not None
    stored = await scheduled_order_service.get(schedule.id, CUSTOMER.user_id)
    assert stored.status == expected
    assert stored.current_occurrence == 2
    assert stored.next_execution_date == date(2024, 1, 22)
    assert (await scheduler.run_once(today=date(2024, 1, 22))).due == 0


@pytest.mark.asyncio
async def test_pause_is_applied_on_top_of_a_concurrent_execution(test_session_factory, scheduler, order_service):
    service = SweepingScheduledOrderService(test_session_factory, locks=ScheduleLockRegistry())
    schedule = await service.create(
        schedule_request(OrderType.RECURRING, RecurrenceType.WEEKLY, date(2024, 1, 1)), CUSTOMER
    )
    await scheduler.run_once(today=date(2024, 1, 8))

    service.on_first_load = lambda: scheduler.run_once(today=date(2024, 1, 15))
    paused = await service.pause(schedule.id, CUSTOMER.user_id)

    assert service.loads == 2, "the stale first load is retried"
    assert paused.status == ScheduledOrderStatus.PAUSED
    assert paused.current_occurrence == 2
    assert paused.next_execution_date == date(2024, 1, 22)

    history = await service.execution_history(schedule.id, CUSTOMER.user_id)
    assert [record.status for record in history] == [ExecutionOutcome.SUCCESS] * 2


@pytest.mark.asyncio
async def test_start_and_stop(scheduler):
    scheduler.start()
    assert scheduler.is_running

    await asyncio.sleep(0)
    await scheduler.stop()

    assert not scheduler.is_running
