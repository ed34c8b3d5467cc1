"""Tests for CarbonSummaryAggregator: totals, badges and monthly buckets."""
from datetime import date
from decimal import Decimal

import pytest

from freshcart.domain.entities import CarbonFootprintHistory
from freshcart.domain.services.carbon_summary import CarbonSummaryAggregator


def _history(*entries):
    return [
        CarbonFootprintHistory(
            user_id=1,
            order_id=index,
            carbon_footprint_kg=Decimal(kg),
            order_date=order_date,
        )
        for index, (kg, order_date) in enumerate(entries, start=1)
    ]


@pytest.fixture
def aggregator() -> CarbonSummaryAggregator:
    return CarbonSummaryAggregator()


def test_empty_history_gives_zeroed_summary(aggregator):
    summary = aggregator.summarize(7, [])

    assert summary.user_id == 7
    assert summary.total_orders == 0
    assert summary.total_carbon_kg == Decimal("0")
    assert summary.average_carbon_per_order_kg == Decimal("0")
    assert summary.carbon_saved_kg == Decimal("0")
    assert summary.first_order_date is None
    assert summary.eco_badge is None, "no badge without orders"
    assert summary.monthly_footprints == ()


def test_totals_and_extremes(aggregator):
    summary = aggregator.summarize(
        1,
        _history(
            ("1.0", date(2024, 1, 10)),
            ("1.0", date(2024, 3, 2)),
            ("2.0", date(2024, 2, 5)),
        ),
    )

    assert summary.total_orders == 3
    assert summary.total_carbon_kg == Decimal("4.0")
    assert summary.average_carbon_per_order_kg == Decimal("1.3333")
    assert summary.min_carbon_kg == Decimal("1.0")
    assert summary.max_carbon_kg == Decimal("2.0")
    assert summary.first_order_date == date(2024, 1, 10)
    assert summary.last_order_date == date(2024, 3, 2)
    assert summary.carbon_saved_kg == Decimal("41.0"), "3 x 15.0 baseline - 4.0"


@pytest.mark.parametrize(
    "amounts,expected",
    [
        (["4.0"] * 5, "🌱 Eco Warrior"),
        (["4.0"] * 4, "🌿 Green Shopper"),
        (["4.0"], "🌍 Climate Conscious"),
        (["12.0"], "🌍 Climate Conscious"),
        (["20.0"], "🛒 Regular Shopper"),
    ],
)
def test_badges(aggregator, amounts, expected):
    history = _history(*[(kg, date(2024, 1, 1)) for kg in amounts])

    assert aggregator.summarize(1, history).eco_badge == expected


def test_monthly_buckets_most_recent_first(aggregator):
    summary = aggregator.summarize(
        1,
        _history(
            ("1.5", date(2024, 1, 3)),
            ("2.25", date(2024, 1, 20)),
            ("3.0", date(2024, 3, 1)),
        ),
    )

    months = [(bucket.month, bucket.carbon_kg, bucket.order_count) for bucket in summary.monthly_footprints]
    assert months == [
        ("2024-03", Decimal("3.0000"), 1),
        ("2024-01", Decimal("3.7500"), 2),
    ]


def test_monthly_buckets_keep_last_twelve_months(aggregator):
    history = _history(*[("1.0", date(2023, month, 1)) for month in range(1, 13)], ("1.0", date(2024, 1, 1)))

    months = [bucket.month for bucket in aggregator.summarize(1, history).monthly_footprints]

    assert len(months) == 12
    assert months[0] == "2024-01"
    assert "2023-01" not in months


def test_custom_baseline():
    summary = CarbonSummaryAggregator(baseline_per_order_kg=Decimal("5")).summarize(
        1, _history(("6.0", date(2024, 1, 1)))
    )

    assert summary.carbon_saved_kg == Decimal("-1.0")
