"""
Carbon footprint estimation.

Product footprints come from a keyword-based category classifier and a
per-category emission factor table. Delivery and packaging add fixed
components. All figures are kg CO2, rounded half-up to 4 decimal places.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Tuple

from ..enums import PackagingType
from ..value_objects import CARBON_PLACES, round_half_up, to_decimal

DEFAULT_CATEGORY = "Default"


class CarbonLine(Protocol):
    product_name: str
    quantity: Optional[int]
    weight: Optional[Decimal]


@dataclass(frozen=True)
class CategoryRule:
    """Maps product names containing any of ``keywords`` to ``category``."""
    category: str
    keywords: Tuple[str, ...]

    def matches(self, product_name: str) -> bool:
        name = product_name.lower()
        return any(keyword in name for keyword in self.keywords)


DEFAULT_CATEGORY_RULES: Tuple[CategoryRule, ...] = (
    CategoryRule("Meat", ("meat", "chicken", "beef", "pork", "lamb", "fish")),
    CategoryRule("Dairy", ("milk", "cheese", "yogurt", "butter", "cream")),
    CategoryRule("Fruits", ("apple", "banana", "orange", "grape", "berry", "fruit")),
    CategoryRule("Vegetables", ("vegetable", "carrot", "potato", "tomato", "onion", "pepper")),
    CategoryRule("Grains", ("rice", "wheat", "bread", "flour", "pasta")),
    CategoryRule("Beverages", ("drink", "juice", "soda", "water", "tea", "coffee")),
    CategoryRule("Frozen", ("frozen",)),
    CategoryRule("Canned", ("canned",)),
)


class CategoryClassifier:
    """Ordered first-match-wins category lookup by product name."""

    def __init__(self, rules: Sequence[CategoryRule] = DEFAULT_CATEGORY_RULES) -> None:
        self._rules = tuple(rules)

    def classify(self, product_name: Optional[str]) -> str:
        if not product_name:
            return DEFAULT_CATEGORY
        for rule in self._rules:
            if rule.matches(product_name):
                return rule.category
        return DEFAULT_CATEGORY


def _frozen(mapping: Dict) -> Mapping:
    return MappingProxyType(dict(mapping))


DEFAULT_EMISSION_FACTORS: Mapping[str, Decimal] = _frozen({
    "Meat": Decimal("27.0"),
    "Dairy": Decimal("3.2"),
    "Fruits": Decimal("0.4"),
    "Vegetables": Decimal("0.4"),
    "Fruits & Vegetables": Decimal("0.4"),
    "Grains": Decimal("0.5"),
    "Beverages": Decimal("0.3"),
    "Snacks": Decimal("2.0"),
    "Frozen": Decimal("1.5"),
    "Canned": Decimal("1.2"),
    DEFAULT_CATEGORY: Decimal("1.0"),
})

DEFAULT_PACKAGING_FACTORS: Mapping[PackagingType, Decimal] = _frozen({
    PackagingType.STANDARD: Decimal("0.5"),
    PackagingType.ECO_FRIENDLY: Decimal("0.2"),
    PackagingType.MINIMAL: Decimal("0.1"),
})


@dataclass(frozen=True)
class EmissionConfig:
    """
    Immutable emission tables, built once at startup and injected.

    Attributes:
        category_factors: kg CO2 per kg of product, by category
        packaging_factors: kg CO2 per order, by packaging type
        delivery_factor_per_km: kg CO2 per delivery km
        default_distance_km: distance used when the order has none
        default_item_weight_kg: assumed weight of one unweighted item
        default_packaging: packaging used when the order has none
    """
    category_factors: Mapping[str, Decimal] = field(default_factory=lambda: DEFAULT_EMISSION_FACTORS)
    packaging_factors: Mapping[PackagingType, Decimal] = field(
        default_factory=lambda: DEFAULT_PACKAGING_FACTORS
    )
    delivery_factor_per_km: Decimal = Decimal("0.2")
    default_distance_km: Decimal = Decimal("5.0")
    default_item_weight_kg: Decimal = Decimal("0.5")
    default_packaging: PackagingType = PackagingType.STANDARD

    def __post_init__(self):
        object.__setattr__(self, "category_factors", _frozen(self.category_factors))
        object.__setattr__(self, "packaging_factors", _frozen(self.packaging_factors))

    def factor_for(self, category: str) -> Decimal:
        return self.category_factors.get(category, self.category_factors[DEFAULT_CATEGORY])


@dataclass(frozen=True)
class CategoryFootprint:
    name: str
    carbon_footprint_kg: Decimal
    item_count: int


@dataclass(frozen=True)
class CarbonEstimate:
    """Footprint of one order with its breakdown and per-category split."""
    total_kg: Decimal
    product_kg: Decimal
    delivery_kg: Decimal
    packaging_kg: Decimal
    delivery_distance_km: Decimal
    packaging_type: PackagingType
    categories: Tuple[CategoryFootprint, ...] = ()


class CarbonFootprintEstimator:
    """Estimates kg CO2 for an order's lines, delivery and packaging."""

    def __init__(
        self,
        config: Optional[EmissionConfig] = None,
        classifier: Optional[CategoryClassifier] = None,
    ) -> None:
        self._config = config or EmissionConfig()
        self._classifier = classifier or CategoryClassifier()

    def line_weight(self, line: CarbonLine) -> Decimal:
        if line.weight is not None and to_decimal(line.weight) > 0:
            return to_decimal(line.weight)
        quantity = line.quantity if line.quantity is not None else 1
        return self._config.default_item_weight_kg * quantity

    def estimate(
        self,
        lines: Iterable[CarbonLine],
        delivery_distance_km: Optional[Decimal] = None,
        packaging_type: Optional[PackagingType] = None,
    ) -> CarbonEstimate:
        """
        Estimate the footprint of an order.

        Args:
            lines: Order lines (name, quantity, weight)
            delivery_distance_km: Delivery distance; default distance if None
            packaging_type: Packaging; default packaging if None

        Returns:
            CarbonEstimate rounded to 4 decimal places
        """
        per_category: Dict[str, List[Decimal]] = {}
        item_counts: Dict[str, int] = {}
        product_kg = Decimal("0")

        for line in lines:
            category = self._classifier.classify(line.product_name)
            line_kg = self.line_weight(line) * self._config.factor_for(category)
            product_kg += line_kg
            per_category.setdefault(category, []).append(line_kg)
            item_counts[category] = item_counts.get(category, 0) + (
                line.quantity if line.quantity is not None else 1
            )

        distance = (
            to_decimal(delivery_distance_km)
            if delivery_distance_km is not None
            else self._config.default_distance_km
        )
        delivery_kg = distance * self._config.delivery_factor_per_km

        packaging = packaging_type or self._config.default_packaging
        packaging_kg = self._config.packaging_factors.get(
            packaging, self._config.packaging_factors[self._config.default_packaging]
        )

        categories = tuple(
            CategoryFootprint(
                name=name,
                carbon_footprint_kg=round_half_up(sum(amounts, Decimal("0")), CARBON_PLACES),
                item_count=item_counts[name],
            )
            for name, amounts in per_category.items()
        )

        return CarbonEstimate(
            total_kg=round_half_up(product_kg + delivery_kg + packaging_kg, CARBON_PLACES),
            product_kg=round_half_up(product_kg, CARBON_PLACES),
            delivery_kg=round_half_up(delivery_kg, CARBON_PLACES),
            packaging_kg=round_half_up(packaging_kg, CARBON_PLACES),
            delivery_distance_km=distance,
            packaging_type=packaging,
            categories=categories,
        )
