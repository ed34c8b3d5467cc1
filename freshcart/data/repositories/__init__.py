"""SQLAlchemy repository implementations."""

from .carbon_history_repository_impl import SqlAlchemyCarbonHistoryRepository
from .order_repository_impl import SqlAlchemyOrderRepository
from .scheduled_order_repository_impl import SqlAlchemyScheduledOrderRepository

__all__ = [
    "SqlAlchemyCarbonHistoryRepository",
    "SqlAlchemyOrderRepository",
    "SqlAlchemyScheduledOrderRepository",
]
