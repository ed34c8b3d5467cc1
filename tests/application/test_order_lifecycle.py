"""
Tests for OrderLifecycleService.

Runs against in-memory SQLite with a fake catalog and a recording
publisher. Verifies pricing, the stock-decrement edge, carbon history
and that side-effect failures never fail the order.
"""
from datetime import datetime
from decimal import Decimal

import pytest

from freshcart.application.dtos.order_dto import OrderItemDTO
from freshcart.application.services import OrderLifecycleService
from freshcart.data.uow import create_uow
from freshcart.domain.enums import OrderStatus, PackagingType, PaymentMethod
from freshcart.domain.exceptions import AccessDeniedError, NotFoundError

from tests.mocks.builders import ADMIN, CUSTOMER, OTHER_CUSTOMER, order_request
from tests.mocks.fake_catalog_client import FakeCatalogClient
from tests.mocks.recording_publisher import RecordingPublisher


class ExplodingEstimator:
    """Carbon estimator that always fails."""

    def estimate(self, *args, **kwargs):
        raise RuntimeError("emission tables unavailable")


def _item(product_id: int, name: str, price: str, quantity=None, weight=None) -> OrderItemDTO:
    return OrderItemDTO(
        product_id=product_id,
        product_name=name,
        price=Decimal(price),
        quantity=quantity,
        weight=Decimal(weight) if weight is not None else None,
    )


# =============================================================================
# CREATE
# =============================================================================

@pytest.mark.asyncio
async def test_create_online_order(order_service, catalog_client, publisher):
    """Online orders are priced, start PENDING and leave stock untouched."""
    order = await order_service.create_order(order_request(), CUSTOMER)

    assert order.id is not None
    assert order.order_number.startswith("ORD-")
    assert order.status == OrderStatus.PENDING
    assert order.subtotal == Decimal("6.78")
    assert order.tax_amount == Decimal("0.41")
    assert order.delivery_fee == Decimal("10.00")
    assert order.total_amount == Decimal("17.19")
    assert len(order.items) == 2
    assert catalog_client.calls == [], "stock must not move before payment"
    assert publisher.topics == ["order.created"]
    assert publisher.payloads("order.created")[0]["data"]["order_number"] == order.order_number


@pytest.mark.asyncio
async def test_create_order_records_carbon(order_service, test_session_factory):
    order = await order_service.create_order(
        order_request(packaging_type=PackagingType.MINIMAL), CUSTOMER
    )

    assert order.carbon_footprint_kg == Decimal("4.9"), "3.2 milk + 0.6 bananas + 1.0 delivery + 0.1"
    assert order.packaging_type == PackagingType.MINIMAL
    assert order.delivery_distance_km == Decimal("5.0")

    async with create_uow(test_session_factory) as uow:
        history = await uow.carbon_history.find_by_order(order.id)
        stored = await uow.orders.find_by_id(order.id)

    assert len(history) == 1
    assert history[0].user_id == CUSTOMER.user_id
    assert history[0].carbon_footprint_kg == Decimal("4.9")
    assert history[0].order_date == order.created_at.date()
    assert stored.carbon_footprint_kg == Decimal("4.9")


@pytest.mark.asyncio
async def test_carbon_failure_does_not_fail_order(test_session_factory, catalog_client, publisher):
    service = OrderLifecycleService(
        test_session_factory, catalog_client, publisher, estimator=ExplodingEstimator()
    )

    order = await service.create_order(order_request(), CUSTOMER)

    assert order.id is not None
    assert order.carbon_footprint_kg is None
    async with create_uow(test_session_factory) as uow:
        assert await uow.carbon_history.find_by_order(order.id) == []


@pytest.mark.asyncio
async def test_pos_order_is_confirmed_and_decrements_stock(order_service, catalog_client):
    order = await order_service.create_pos_order(
        order_request(user_id=5, shipping_address=None, payment_method=PaymentMethod.CASH), ADMIN
    )

    assert order.is_pos_order is True
    assert order.status == OrderStatus.CONFIRMED
    assert order.delivery_fee == Decimal("0.00")
    assert order.total_amount == Decimal("7.19")
    assert sorted(catalog_client.calls) == [(1, 2), (2, 1)], "weighted line counts as 1 unit"


@pytest.mark.asyncio
async def test_pos_order_requires_admin(order_service):
    with pytest.raises(AccessDeniedError):
        await order_service.create_pos_order(order_request(), CUSTOMER)

    with pytest.raises(AccessDeniedError):
        await order_service.create_order(order_request(is_pos_order=True), CUSTOMER)


@pytest.mark.asyncio
async def test_customer_cannot_order_for_someone_else(order_service):
    with pytest.raises(AccessDeniedError):
        await order_service.create_order(order_request(user_id=1), OTHER_CUSTOMER)


@pytest.mark.asyncio
async def test_admin_can_order_for_a_customer(order_service):
    order = await order_service.create_order(order_request(user_id=1), ADMIN)

    assert order.user_id == 1


@pytest.mark.asyncio
async def test_publisher_failure_does_not_fail_order(test_session_factory, catalog_client):
    service = OrderLifecycleService(
        test_session_factory, catalog_client, RecordingPublisher(fail=True)
    )

    order = await service.create_order(order_request(), CUSTOMER)

    assert order.status == OrderStatus.PENDING


# =============================================================================
# STATUS
# =============================================================================

@pytest.mark.asyncio
async def test_stock_decremented_once_on_confirmation(order_service, catalog_client, publisher):
    """Only the edge into CONFIRMED moves stock; repeats and later moves do not."""
    order = await order_service.create_order(order_request(), CUSTOMER)

    confirmed = await order_service.update_order_status(order.id, OrderStatus.CONFIRMED)
    await order_service.update_order_status(order.id, OrderStatus.CONFIRMED)
    await order_service.update_order_status(order.id, OrderStatus.SHIPPED)

    assert confirmed.status == OrderStatus.CONFIRMED
    assert catalog_client.units_for(1) == 2
    assert catalog_client.units_for(2) == 1
    assert len(catalog_client.calls) == 2
    assert publisher.topics.count("order.status_changed") == 2


@pytest.mark.asyncio
async def test_carbon_write_keeps_newer_status(order_service, catalog_client, test_session_factory):
    """A footprint written from an older copy of the order leaves its status alone."""
    order = await order_service.create_order(order_request(), CUSTOMER)
    async with create_uow(test_session_factory) as uow:
        stale = await uow.orders.find_by_id(order.id)

    await order_service.update_order_status(order.id, OrderStatus.CONFIRMED)

    stale.carbon_footprint_kg = Decimal("7.5")
    async with create_uow(test_session_factory) as uow:
        await uow.orders.save_carbon(stale)
        await uow.commit()

    stored = await order_service.get_order(order.id)
    assert stored.status == OrderStatus.CONFIRMED
    assert stored.carbon_footprint_kg == Decimal("7.5")

    # Still CONFIRMED, so a repeated confirmation does not move stock again
    await order_service.update_order_status(order.id, OrderStatus.CONFIRMED)
    assert len(catalog_client.calls) == 2


@pytest.mark.asyncio
async def test_transitions_are_not_restricted(order_service, catalog_client):
    order = await order_service.create_order(order_request(), CUSTOMER)

    await order_service.update_order_status(order.id, OrderStatus.DELIVERED)
    back = await order_service.update_order_status(order.id, OrderStatus.PENDING)

    assert back.status == OrderStatus.PENDING
    assert catalog_client.calls == []


@pytest.mark.asyncio
async def test_failing_stock_line_does_not_stop_others(test_session_factory, publisher):
    catalog = FakeCatalogClient(failing_product_ids=[1])
    service = OrderLifecycleService(test_session_factory, catalog, publisher)
    order = await service.create_order(order_request(), CUSTOMER)

    confirmed = await service.update_order_status(order.id, OrderStatus.CONFIRMED)

    assert confirmed.status == OrderStatus.CONFIRMED
    assert catalog.calls == [(2, 1)]


@pytest.mark.asyncio
async def test_update_status_by_number(order_service, catalog_client):
    order = await order_service.create_order(order_request(), CUSTOMER)

    updated = await order_service.update_order_status_by_number(
        order.order_number, OrderStatus.CONFIRMED
    )

    assert updated.id == order.id
    assert updated.status == OrderStatus.CONFIRMED
    assert len(catalog_client.calls) == 2


@pytest.mark.asyncio
async def test_update_unknown_order(order_service):
    with pytest.raises(NotFoundError):
        await order_service.update_order_status(12345, OrderStatus.CONFIRMED)

    with pytest.raises(NotFoundError):
        await order_service.update_order_status_by_number("ORD-FFFFFFFF", OrderStatus.CONFIRMED)


# =============================================================================
# QUERIES
# =============================================================================

@pytest.mark.asyncio
async def test_get_order_and_by_number(order_service):
    created = await order_service.create_order(order_request(), CUSTOMER)

    by_id = await order_service.get_order(created.id)
    by_number = await order_service.get_order_by_number(created.order_number)

    assert by_id.order_number == created.order_number
    assert by_number.id == created.id
    assert by_id.shipping_address.city == "Springfield"
    assert by_id.total_amount == Decimal("17.19")


@pytest.mark.asyncio
async def test_malformed_order_number_is_not_found(order_service):
    with pytest.raises(NotFoundError):
        await order_service.get_order_by_number("not-an-order")


@pytest.mark.asyncio
async def test_list_orders(order_service):
    first = await order_service.create_order(order_request(), CUSTOMER)
    second = await order_service.create_order(order_request(), CUSTOMER)
    await order_service.create_order(order_request(user_id=2), OTHER_CUSTOMER)
    pos = await order_service.create_pos_order(order_request(user_id=1, shipping_address=None), ADMIN)

    mine = await order_service.list_user_orders(1)
    register = await order_service.list_all_orders(is_pos_order=True)
    everything = await order_service.list_all_orders()

    assert [order.id for order in mine] == [pos.id, second.id, first.id], "newest first"
    assert [order.id for order in register] == [pos.id]
    assert len(everything) == 4


@pytest.mark.asyncio
async def test_frequently_ordered_products(order_service):
    """Products in at least two online orders, most frequent first."""
    await order_service.create_order(
        order_request(items=[_item(1, "Milk", "2.00", quantity=1), _item(2, "Apples", "4.00", weight="1.0")]),
        CUSTOMER,
    )
    await order_service.create_order(
        order_request(items=[_item(1, "Milk", "2.50", quantity=2), _item(2, "Apples", "4.00", weight="2.0")]),
        CUSTOMER,
    )
    await order_service.create_order(
        order_request(items=[_item(1, "Organic Milk", "3.00", quantity=2), _item(3, "Bread", "2.20", quantity=1)]),
        CUSTOMER,
    )
    # Register sales are not part of the shopping pattern
    await order_service.create_pos_order(
        order_request(items=[_item(3, "Bread", "2.20", quantity=1)], shipping_address=None), ADMIN
    )

    products = await order_service.get_frequently_ordered_products(1)

    assert [product.product_id for product in products] == [1, 2]
    milk, apples = products
    assert milk.times_ordered == 3
    assert milk.product_name == "Organic Milk", "latest name wins"
    assert milk.average_price == Decimal("2.50")
    assert milk.average_quantity == 1, "5 // 3"
    assert milk.average_weight is None
    assert milk.last_ordered_date == datetime.utcnow().date()
    assert apples.times_ordered == 2
    assert apples.average_weight == Decimal("1.50")


@pytest.mark.asyncio
async def test_frequently_ordered_products_empty(order_service):
    assert await order_service.get_frequently_ordered_products(1) == []


@pytest.mark.asyncio
async def test_reorder_items(order_service):
    order = await order_service.create_order(order_request(), CUSTOMER)

    items = await order_service.get_reorder_items(order.id, CUSTOMER.user_id)

    assert [(item.product_id, item.quantity) for item in items] == [(1, 2), (2, None)]
    assert items[1].weight == Decimal("1.5")

    with pytest.raises(NotFoundError):
        await order_service.get_reorder_items(order.id, OTHER_CUSTOMER.user_id)
