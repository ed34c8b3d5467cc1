"""
Carbon footprint summary for a user.

Rolls up footprint history into totals, monthly buckets and an eco badge.
"""
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

from ..entities.carbon_footprint import CarbonFootprintHistory
from ..value_objects import CARBON_PLACES, round_half_up

ZERO = Decimal("0")
DEFAULT_BASELINE_PER_ORDER = Decimal("15.0")
MONTHS_IN_SUMMARY = 12


@dataclass(frozen=True)
class BadgeTier:
    """A badge awarded when the average is below ``max_average`` and savings exceed ``min_saved``."""
    name: str
    max_average_kg: Decimal
    min_saved_kg: Optional[Decimal] = None

    def qualifies(self, average_kg: Decimal, saved_kg: Decimal) -> bool:
        if average_kg >= self.max_average_kg:
            return False
        return self.min_saved_kg is None or saved_kg > self.min_saved_kg


DEFAULT_BADGE_TIERS: Tuple[BadgeTier, ...] = (
    BadgeTier("🌱 Eco Warrior", Decimal("5"), Decimal("50")),
    BadgeTier("🌿 Green Shopper", Decimal("10"), Decimal("20")),
    BadgeTier("🌍 Climate Conscious", Decimal("15")),
)
DEFAULT_BADGE = "🛒 Regular Shopper"


@dataclass(frozen=True)
class MonthlyFootprint:
    month: str  # YYYY-MM
    carbon_kg: Decimal
    order_count: int


@dataclass(frozen=True)
class CarbonSummary:
    user_id: int
    total_orders: int = 0
    total_carbon_kg: Decimal = ZERO
    average_carbon_per_order_kg: Decimal = ZERO
    min_carbon_kg: Decimal = ZERO
    max_carbon_kg: Decimal = ZERO
    first_order_date: Optional[date] = None
    last_order_date: Optional[date] = None
    carbon_saved_kg: Decimal = ZERO
    eco_badge: Optional[str] = None
    monthly_footprints: Tuple[MonthlyFootprint, ...] = field(default_factory=tuple)


class CarbonSummaryAggregator:
    """Builds a CarbonSummary from a user's footprint history."""

    def __init__(
        self,
        baseline_per_order_kg: Decimal = DEFAULT_BASELINE_PER_ORDER,
        badge_tiers: Sequence[BadgeTier] = DEFAULT_BADGE_TIERS,
        default_badge: str = DEFAULT_BADGE,
    ) -> None:
        self._baseline = baseline_per_order_kg
        self._badge_tiers = tuple(badge_tiers)
        self._default_badge = default_badge

    def summarize(self, user_id: int, history: Iterable[CarbonFootprintHistory]) -> CarbonSummary:
        records: List[CarbonFootprintHistory] = list(history)
        if not records:
            return CarbonSummary(user_id=user_id)

        amounts = [record.carbon_footprint_kg for record in records]
        count = len(records)
        total = sum(amounts, ZERO)
        average = round_half_up(total / count, CARBON_PLACES)
        saved = self._baseline * count - total
        order_dates = [record.order_date for record in records]

        return CarbonSummary(
            user_id=user_id,
            total_orders=count,
            total_carbon_kg=total,
            average_carbon_per_order_kg=average,
            min_carbon_kg=min(amounts),
            max_carbon_kg=max(amounts),
            first_order_date=min(order_dates),
            last_order_date=max(order_dates),
            carbon_saved_kg=saved,
            eco_badge=self.badge_for(average, saved),
            monthly_footprints=self.monthly_buckets(records),
        )

    def badge_for(self, average_kg: Decimal, saved_kg: Decimal) -> str:
        for tier in self._badge_tiers:
            if tier.qualifies(average_kg, saved_kg):
                return tier.name
        return self._default_badge

    @staticmethod
    def monthly_buckets(
        records: Iterable[CarbonFootprintHistory], limit: int = MONTHS_IN_SUMMARY
    ) -> Tuple[MonthlyFootprint, ...]:
        """Per-month totals, most recent month first."""
        buckets: "OrderedDict[str, List[Decimal]]" = OrderedDict()
        for record in records:
            key = record.order_date.strftime("%Y-%m")
            buckets.setdefault(key, []).append(record.carbon_footprint_kg)

        months = sorted(buckets, reverse=True)[:limit]
        return tuple(
            MonthlyFootprint(
                month=month,
                carbon_kg=round_half_up(sum(buckets[month], ZERO), CARBON_PLACES),
                order_count=len(buckets[month]),
            )
            for month in months
        )
