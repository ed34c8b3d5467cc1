"""Daily and monthly sales reports."""

import calendar
import logging
from collections import OrderedDict
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List

from sqlalchemy.ext.asyncio import async_sessionmaker

from freshcart.application.dtos.sales_dto import SalesReportDTO
from freshcart.data.uow import create_uow
from freshcart.domain.entities import Order
from freshcart.domain.enums import OrderStatus, PaymentMethod
from freshcart.domain.exceptions import ValidationError

logger = logging.getLogger(__name__)

REPORTED_STATUSES = (OrderStatus.CONFIRMED, OrderStatus.DELIVERED)
CARD_METHODS = (PaymentMethod.CREDIT_CARD, PaymentMethod.DEBIT_CARD)


class SalesReportService:
    """Revenue reports over confirmed and delivered orders."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        self._session_factory = session_factory

    async def daily_report(self, day: date) -> SalesReportDTO:
        """Sales of one calendar day.

        Args:
            day: Report day

        Returns:
            SalesReportDTO split by register payment method and online sales
        """
        start = datetime.combine(day, time.min)
        orders = await self._load(start, start + timedelta(days=1))
        return self._summarize(day, orders)

    async def monthly_report(self, year: int, month: int) -> List[SalesReportDTO]:
        """One daily report per day of the month that has orders, in date order.

        Raises:
            ValidationError: If month is outside 1-12
        """
        if not 1 <= month <= 12:
            raise ValidationError(f"Invalid month: {month}")

        days_in_month = calendar.monthrange(year, month)[1]
        start = datetime(year, month, 1)
        orders = await self._load(start, start + timedelta(days=days_in_month))

        by_day: Dict[date, List[Order]] = OrderedDict()
        for order in sorted(orders, key=lambda o: o.created_at):
            by_day.setdefault(order.created_at.date(), []).append(order)

        logger.info(f"Monthly report {year}-{month:02d}: {len(orders)} orders on {len(by_day)} days")
        return [self._summarize(day, day_orders) for day, day_orders in by_day.items()]

    async def _load(self, start: datetime, end: datetime) -> List[Order]:
        async with create_uow(self._session_factory) as uow:
            return await uow.orders.find_by_status_between(REPORTED_STATUSES, start, end)

    @staticmethod
    def _summarize(day: date, orders: Iterable[Order]) -> SalesReportDTO:
        orders = list(orders)
        zero = Decimal("0.00")
        total = cash = card = qr = online = zero

        for order in orders:
            amount = order.total_amount.amount
            total += amount
            if not order.is_pos_order:
                online += amount
            elif order.payment_method == PaymentMethod.CASH:
                cash += amount
            elif order.payment_method in CARD_METHODS:
                card += amount
            elif order.payment_method == PaymentMethod.QR_CODE:
                qr += amount

        return SalesReportDTO(
            date=day,
            total_orders=len(orders),
            total_revenue=total,
            cash_sales=cash,
            card_sales=card,
            qr_sales=qr,
            online_sales=online,
        )
