"""
Tests for the carbon footprint estimator and the category classifier.
"""
from decimal import Decimal

import pytest

from freshcart.domain.entities import OrderLine
from freshcart.domain.enums import PackagingType
from freshcart.domain.services.carbon import (
    CarbonFootprintEstimator,
    CategoryClassifier,
    EmissionConfig,
)


def _line(name: str, quantity=None, weight=None) -> OrderLine:
    return OrderLine(
        product_id=1,
        product_name=name,
        price=Decimal("1.00"),
        quantity=quantity,
        weight=Decimal(weight) if weight is not None else None,
    )


@pytest.mark.parametrize(
    "product_name,expected",
    [
        ("Chicken Breast", "Meat"),
        ("Butter Chicken Sauce", "Meat"),
        ("Greek Yogurt", "Dairy"),
        ("Pineapple", "Fruits"),
        ("Orange Juice", "Fruits"),
        ("Canned Tomatoes", "Vegetables"),
        ("Canned Chickpeas", "Canned"),
        ("Wholegrain Pasta", "Grains"),
        ("Green Tea", "Beverages"),
        ("Frozen Peas", "Frozen"),
        ("Frozen Fish Fingers", "Meat"),
        ("Dish Soap", "Default"),
        ("", "Default"),
        (None, "Default"),
    ],
)
def test_classifier_first_match_wins(product_name, expected):
    """Rules are checked in order, case-insensitively."""
    assert CategoryClassifier().classify(product_name) == expected


def test_estimate_with_defaults():
    """Unweighted items weigh 0.5 kg; 5 km at 0.2 kg/km; standard packaging 0.5 kg."""
    estimate = CarbonFootprintEstimator().estimate([_line("Beef Mince", quantity=2)])

    assert estimate.product_kg == Decimal("27.0000")
    assert estimate.delivery_kg == Decimal("1.0000")
    assert estimate.packaging_kg == Decimal("0.5000")
    assert estimate.total_kg == Decimal("28.5000")
    assert estimate.delivery_distance_km == Decimal("5.0")
    assert estimate.packaging_type == PackagingType.STANDARD


def test_estimate_weighted_line_with_distance_and_packaging():
    estimate = CarbonFootprintEstimator().estimate(
        [_line("Apples", weight="1.2")],
        delivery_distance_km=Decimal("10"),
        packaging_type=PackagingType.ECO_FRIENDLY,
    )

    assert estimate.product_kg == Decimal("0.4800")
    assert estimate.delivery_kg == Decimal("2.0000")
    assert estimate.packaging_kg == Decimal("0.2000")
    assert estimate.total_kg == Decimal("2.6800")


def test_estimate_rounds_to_four_places():
    estimate = CarbonFootprintEstimator().estimate(
        [_line("Bananas", weight="0.33333")], packaging_type=PackagingType.MINIMAL
    )

    assert estimate.product_kg == Decimal("0.1333")
    assert estimate.total_kg == Decimal("1.2333")


def test_category_breakdown_groups_lines():
    estimate = CarbonFootprintEstimator().estimate(
        [
            _line("Whole Milk", quantity=2),
            _line("Cheddar Cheese", weight="0.25"),
            _line("Rice", quantity=1),
        ]
    )

    categories = {category.name: category for category in estimate.categories}
    assert set(categories) == {"Dairy", "Grains"}
    assert categories["Dairy"].carbon_footprint_kg == Decimal("4.0000")
    assert categories["Dairy"].item_count == 3, "2 bottles of milk + 1 cheese line"
    assert categories["Grains"].carbon_footprint_kg == Decimal("0.2500")


def test_empty_order_still_has_delivery_and_packaging():
    estimate = CarbonFootprintEstimator().estimate([])

    assert estimate.product_kg == Decimal("0.0000")
    assert estimate.total_kg == Decimal("1.5000")
    assert estimate.categories == ()


def test_custom_config_overrides_factors():
    config = EmissionConfig(
        category_factors={"Meat": Decimal("30.0"), "Default": Decimal("1.0")},
        delivery_factor_per_km=Decimal("0.1"),
        default_distance_km=Decimal("2"),
    )

    estimate = CarbonFootprintEstimator(config).estimate([_line("Lamb Chops", weight="1")])

    assert estimate.product_kg == Decimal("30.0000")
    assert estimate.delivery_kg == Decimal("0.2000")


def test_unknown_category_uses_default_factor():
    config = EmissionConfig(category_factors={"Default": Decimal("2.0")})

    estimate = CarbonFootprintEstimator(config).estimate([_line("Chicken", quantity=1)])

    assert estimate.product_kg == Decimal("1.0000")


def test_emission_tables_are_read_only():
    config = EmissionConfig()

    with pytest.raises(TypeError):
        config.category_factors["Meat"] = Decimal("0")
