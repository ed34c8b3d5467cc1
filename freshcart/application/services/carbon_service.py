"""Carbon footprint queries."""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from freshcart.application.dtos.carbon_dto import (
    CarbonBreakdownDTO,
    CarbonFootprintDTO,
    CategoryFootprintDTO,
    MonthlyFootprintDTO,
    UserCarbonSummaryDTO,
)
from freshcart.data.uow import create_uow
from freshcart.domain.exceptions import NotFoundError
from freshcart.domain.services.carbon import CarbonFootprintEstimator
from freshcart.domain.services.carbon_summary import CarbonSummaryAggregator

logger = logging.getLogger(__name__)


class CarbonQueryService:
    """Read side of the carbon model: per-order estimates and per-user summaries."""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        estimator: Optional[CarbonFootprintEstimator] = None,
        aggregator: Optional[CarbonSummaryAggregator] = None,
    ) -> None:
        self._session_factory = session_factory
        self._estimator = estimator or CarbonFootprintEstimator()
        self._aggregator = aggregator or CarbonSummaryAggregator()

    async def get_order_footprint(self, order_id: int) -> CarbonFootprintDTO:
        """Recompute the full estimate of a stored order.

        The distance and packaging recorded on the order are reused.

        Args:
            order_id: Order id

        Returns:
            CarbonFootprintDTO with breakdown and category split

        Raises:
            NotFoundError: If the order does not exist
        """
        async with create_uow(self._session_factory) as uow:
            order = await uow.orders.find_by_id(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)

        estimate = self._estimator.estimate(
            order.lines,
            delivery_distance_km=order.delivery_distance_km,
            packaging_type=order.packaging_type,
        )
        return CarbonFootprintDTO(
            order_id=order_id,
            carbon_footprint_kg=estimate.total_kg,
            delivery_distance_km=estimate.delivery_distance_km,
            packaging_type=estimate.packaging_type,
            breakdown=CarbonBreakdownDTO(
                product_footprint_kg=estimate.product_kg,
                delivery_footprint_kg=estimate.delivery_kg,
                packaging_footprint_kg=estimate.packaging_kg,
            ),
            category_footprints=[
                CategoryFootprintDTO(
                    category_name=category.name,
                    carbon_footprint_kg=category.carbon_footprint_kg,
                    item_count=category.item_count,
                )
                for category in estimate.categories
            ],
        )

    async def get_user_summary(self, user_id: int) -> UserCarbonSummaryDTO:
        """Aggregate a user's footprint history; empty history gives a zeroed summary."""
        async with create_uow(self._session_factory) as uow:
            history = await uow.carbon_history.find_by_user(user_id)

        summary = self._aggregator.summarize(user_id, history)
        logger.debug(f"Carbon summary for user {user_id}: {summary.total_orders} orders")

        return UserCarbonSummaryDTO(
            user_id=summary.user_id,
            total_orders=summary.total_orders,
            total_carbon_kg=summary.total_carbon_kg,
            average_carbon_per_order_kg=summary.average_carbon_per_order_kg,
            min_carbon_kg=summary.min_carbon_kg,
            max_carbon_kg=summary.max_carbon_kg,
            first_order_date=summary.first_order_date,
            last_order_date=summary.last_order_date,
            carbon_saved_kg=summary.carbon_saved_kg,
            eco_badge=summary.eco_badge,
            monthly_footprints=[
                MonthlyFootprintDTO(
                    month=bucket.month,
                    carbon_kg=bucket.carbon_kg,
                    order_count=bucket.order_count,
                )
                for bucket in summary.monthly_footprints
            ],
        )
