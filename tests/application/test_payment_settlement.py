"""
Tests for PaymentSettlementHandler.

A ``payment.succeeded`` event confirms the order, which moves stock.
"""
import pytest

from freshcart.application.services import PAYMENT_SUCCEEDED_TOPIC, PaymentSettlementHandler
from freshcart.domain.enums import OrderStatus
from orchestration.bus import InMemoryEventBus

from tests.mocks.builders import CUSTOMER, order_request


@pytest.mark.asyncio
async def test_payment_confirms_order(order_service, catalog_client):
    order = await order_service.create_order(order_request(), CUSTOMER)
    handler = PaymentSettlementHandler(order_service)

    await handler.handle({"orderNumber": order.order_number, "paymentId": "pay-1"})

    confirmed = await order_service.get_order(order.id)
    assert confirmed.status == OrderStatus.CONFIRMED
    assert len(catalog_client.calls) == 2


@pytest.mark.asyncio
async def test_payment_through_event_bus(order_service, catalog_client):
    order = await order_service.create_order(order_request(), CUSTOMER)
    bus = InMemoryEventBus()
    bus.subscribe(PAYMENT_SUCCEEDED_TOPIC, PaymentSettlementHandler(order_service))

    await bus.publish(PAYMENT_SUCCEEDED_TOPIC, {"orderNumber": order.order_number, "paymentId": "pay-2"})
    # Redelivered event must not move stock again
    await bus.publish(PAYMENT_SUCCEEDED_TOPIC, {"orderNumber": order.order_number, "paymentId": "pay-2"})

    confirmed = await order_service.get_order(order.id)
    assert confirmed.status == OrderStatus.CONFIRMED
    assert len(catalog_client.calls) == 2


@pytest.mark.asyncio
async def test_unknown_or_missing_order_number_is_ignored(order_service, catalog_client):
    handler = PaymentSettlementHandler(order_service)

    await handler.handle({"orderNumber": "ORD-DEADBEEF", "paymentId": "pay-3"})
    await handler.handle({"paymentId": "pay-4"})

    assert catalog_client.calls == []
