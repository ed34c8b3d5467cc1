"""
Tests for SqlAlchemyScheduledOrderRepository.

Persistence of new aggregates and the version check on save.
"""
from datetime import date
from decimal import Decimal

import pytest

from freshcart.data.uow import create_uow
from freshcart.domain.entities import ScheduledOrder, ScheduledOrderLine
from freshcart.domain.enums import OrderType, ScheduledOrderStatus
from freshcart.domain.exceptions import ConcurrentModificationError
from freshcart.domain.value_objects import CartItemSnapshot, ShippingAddress


def _schedule() -> ScheduledOrder:
    return ScheduledOrder(
        user_id=1,
        order_name="Pantry refill",
        order_type=OrderType.ONE_TIME,
        scheduled_date=date(2024, 5, 1),
        next_execution_date=date(2024, 5, 1),
        cart_snapshot=[CartItemSnapshot(product_id=4, product_name="Rice", price=Decimal("3.10"), quantity=2)],
        shipping_address=ShippingAddress(street="12 Market Street", city="Springfield"),
        lines=[
            ScheduledOrderLine(
                product_id=4,
                product_name="Rice",
                price=Decimal("3.10"),
                quantity=2,
                subtotal=Decimal("6.20"),
            )
        ],
    )


@pytest.mark.asyncio
async def test_add_new_schedule(test_session_factory):
    schedule = _schedule()

    async with create_uow(test_session_factory) as uow:
        await uow.scheduled_orders.add(schedule)
        await uow.commit()

    assert schedule.id is not None
    assert schedule.execution_history == []
    assert [line.id is not None for line in schedule.lines] == [True]

    async with create_uow(test_session_factory) as uow:
        stored = await uow.scheduled_orders.find_by_id(schedule.id)

    assert stored.version == schedule.version
    assert stored.lines[0].subtotal == Decimal("6.20")
    assert stored.shipping_address.city == "Springfield"


@pytest.mark.asyncio
async def test_save_bumps_version(test_session_factory):
    schedule = _schedule()
    async with create_uow(test_session_factory) as uow:
        await uow.scheduled_orders.add(schedule)
        await uow.commit()
    created_version = schedule.version

    schedule.order_name = "Renamed"
    async with create_uow(test_session_factory) as uow:
        await uow.scheduled_orders.save(schedule)
        await uow.commit()

    assert schedule.version == created_version + 1


@pytest.mark.asyncio
async def test_save_with_a_stale_copy_is_rejected(test_session_factory):
    schedule = _schedule()
    async with create_uow(test_session_factory) as uow:
        await uow.scheduled_orders.add(schedule)
        await uow.commit()

    async with create_uow(test_session_factory) as uow:
        stale = await uow.scheduled_orders.find_by_id(schedule.id)

    schedule.cancel()
    async with create_uow(test_session_factory) as uow:
        await uow.scheduled_orders.save(schedule)
        await uow.commit()

    stale.order_name = "Overwritten"
    with pytest.raises(ConcurrentModificationError):
        async with create_uow(test_session_factory) as uow:
            await uow.scheduled_orders.save(stale)
            await uow.commit()

    async with create_uow(test_session_factory) as uow:
        stored = await uow.scheduled_orders.find_by_id(schedule.id)
    assert stored.status == ScheduledOrderStatus.CANCELLED
    assert stored.order_name == "Pantry refill"


@pytest.mark.asyncio
async def test_delete_with_a_stale_copy_is_rejected(test_session_factory):
    schedule = _schedule()
    async with create_uow(test_session_factory) as uow:
        await uow.scheduled_orders.add(schedule)
        await uow.commit()
    stale_version = schedule.version

    schedule.order_name = "Renamed"
    async with create_uow(test_session_factory) as uow:
        await uow.scheduled_orders.save(schedule)
        await uow.commit()

    schedule.version = stale_version
    with pytest.raises(ConcurrentModificationError):
        async with create_uow(test_session_factory) as uow:
            await uow.scheduled_orders.delete(schedule)
            await uow.commit()

    async with create_uow(test_session_factory) as uow:
        assert await uow.scheduled_orders.find_by_id(schedule.id) is not None
