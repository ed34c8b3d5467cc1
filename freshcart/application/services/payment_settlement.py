"""Confirms orders when the payment service reports a settled payment."""

import logging
from typing import Any, Dict

from freshcart.domain.enums import OrderStatus
from freshcart.domain.exceptions import NotFoundError

from .order_service import OrderLifecycleService

logger = logging.getLogger(__name__)

PAYMENT_SUCCEEDED_TOPIC = "payment.succeeded"


class PaymentSettlementHandler:
    """
    Bus handler for ``payment.succeeded``.

    Payload: ``{"orderNumber": "ORD-XXXXXXXX", "paymentId": "..."}``.
    The order moves to CONFIRMED, which triggers the stock decrement.
    """

    topic = PAYMENT_SUCCEEDED_TOPIC

    def __init__(self, order_service: OrderLifecycleService) -> None:
        self._order_service = order_service

    async def __call__(self, event: Any) -> None:
        await self.handle(event.payload)

    async def handle(self, payload: Dict[str, Any]) -> None:
        """Confirm the paid order.

        Args:
            payload: Message body of the payment event
        """
        order_number = payload.get("orderNumber")
        payment_id = payload.get("paymentId")
        if not order_number:
            logger.warning(f"Ignoring payment event without orderNumber: {payload}")
            return

        try:
            order = await self._order_service.update_order_status_by_number(
                order_number, OrderStatus.CONFIRMED
            )
        except NotFoundError:
            logger.warning(f"Payment {payment_id} references unknown order {order_number}")
            return

        logger.info(f"Payment {payment_id} settled order {order.order_number}")
