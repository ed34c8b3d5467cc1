"""Application services."""
from .carbon_service import CarbonQueryService
from .order_service import OrderLifecycleService
from .payment_settlement import PAYMENT_SUCCEEDED_TOPIC, PaymentSettlementHandler
from .sales_report_service import SalesReportService
from .scheduled_order_service import ScheduledOrderService

__all__ = [
    "CarbonQueryService",
    "OrderLifecycleService",
    "PAYMENT_SUCCEEDED_TOPIC",
    "PaymentSettlementHandler",
    "SalesReportService",
    "ScheduledOrderService",
]
