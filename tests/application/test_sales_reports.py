"""Tests for SalesReportService."""
from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from freshcart.application.dtos.order_dto import OrderItemDTO
from freshcart.domain.enums import OrderStatus, PaymentMethod
from freshcart.domain.exceptions import ValidationError

from tests.mocks.builders import ADMIN, CUSTOMER, order_request

TEN_DOLLAR_ITEM = [OrderItemDTO(product_id=1, product_name="Rice", price=Decimal("10.00"), quantity=1)]


async def _pos_sale(order_service, method: PaymentMethod):
    return await order_service.create_pos_order(
        order_request(items=TEN_DOLLAR_ITEM, shipping_address=None, payment_method=method), ADMIN
    )


@pytest.fixture
def today() -> date:
    # Orders are stamped in UTC
    return datetime.utcnow().date()


@pytest.mark.asyncio
async def test_daily_report_splits_by_channel(order_service, sales_report_service, today):
    for method in (
        PaymentMethod.CASH,
        PaymentMethod.CREDIT_CARD,
        PaymentMethod.DEBIT_CARD,
        PaymentMethod.QR_CODE,
    ):
        await _pos_sale(order_service, method)

    online = await order_service.create_order(order_request(items=TEN_DOLLAR_ITEM), CUSTOMER)
    await order_service.update_order_status(online.id, OrderStatus.DELIVERED)
    # Unpaid and cancelled orders are not revenue
    await order_service.create_order(order_request(items=TEN_DOLLAR_ITEM), CUSTOMER)
    cancelled = await _pos_sale(order_service, PaymentMethod.CASH)
    await order_service.update_order_status(cancelled.id, OrderStatus.CANCELLED)

    report = await sales_report_service.daily_report(today)

    assert report.date == today
    assert report.total_orders == 5
    assert report.cash_sales == Decimal("10.61")
    assert report.card_sales == Decimal("21.22")
    assert report.qr_sales == Decimal("10.61")
    assert report.online_sales == Decimal("20.61"), "10.00 + 0.61 tax + 10.00 delivery"
    assert report.total_revenue == Decimal("63.05")


@pytest.mark.asyncio
async def test_daily_report_without_orders(sales_report_service, today):
    report = await sales_report_service.daily_report(today - timedelta(days=1))

    assert report.total_orders == 0
    assert report.total_revenue == Decimal("0")


@pytest.mark.asyncio
async def test_monthly_report_has_one_entry_per_active_day(order_service, sales_report_service, today):
    await _pos_sale(order_service, PaymentMethod.CASH)
    await _pos_sale(order_service, PaymentMethod.QR_CODE)

    reports = await sales_report_service.monthly_report(today.year, today.month)

    assert [report.date for report in reports] == [today]
    assert reports[0].total_orders == 2
    assert reports[0].total_revenue == Decimal("21.22")


@pytest.mark.asyncio
async def test_monthly_report_for_empty_month(sales_report_service):
    assert await sales_report_service.monthly_report(2001, 2) == []


@pytest.mark.asyncio
async def test_monthly_report_rejects_invalid_month(sales_report_service):
    with pytest.raises(ValidationError):
        await sales_report_service.monthly_report(2024, 13)
