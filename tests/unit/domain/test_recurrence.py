"""Tests for recurrence date arithmetic and schedule continuation."""
from datetime import date

import pytest

from freshcart.domain.enums import OrderType, RecurrenceType, ScheduledOrderStatus
from freshcart.domain.services.recurrence import (
    add_months,
    continuation,
    initial_execution_date,
    next_date,
)


@pytest.mark.parametrize(
    "current,recurrence,expected",
    [
        (date(2024, 1, 15), RecurrenceType.DAILY, date(2024, 1, 16)),
        (date(2024, 12, 31), RecurrenceType.DAILY, date(2025, 1, 1)),
        (date(2024, 1, 15), RecurrenceType.WEEKLY, date(2024, 1, 22)),
        (date(2024, 2, 26), RecurrenceType.WEEKLY, date(2024, 3, 4)),
        (date(2024, 1, 15), RecurrenceType.MONTHLY, date(2024, 2, 15)),
        (date(2024, 1, 31), RecurrenceType.MONTHLY, date(2024, 2, 29)),
        (date(2023, 1, 31), RecurrenceType.MONTHLY, date(2023, 2, 28)),
        (date(2024, 3, 31), RecurrenceType.MONTHLY, date(2024, 4, 30)),
        (date(2024, 12, 15), RecurrenceType.MONTHLY, date(2025, 1, 15)),
    ],
)
def test_next_date(current, recurrence, expected):
    assert next_date(current, recurrence) == expected


def test_add_months_does_not_drift_back():
    """The clamp applies to one step only; a clamped date stays clamped."""
    feb = add_months(date(2024, 1, 31))
    assert feb == date(2024, 2, 29)
    assert add_months(feb) == date(2024, 3, 29)
    assert add_months(date(2024, 1, 31), 2) == date(2024, 3, 31)


def test_initial_date_one_time_is_scheduled_date():
    assert initial_execution_date(date(2024, 5, 1), OrderType.ONE_TIME) == date(2024, 5, 1)


def test_initial_date_recurring_is_one_period_later():
    assert initial_execution_date(
        date(2024, 5, 1), OrderType.RECURRING, RecurrenceType.WEEKLY
    ) == date(2024, 5, 8)


def test_initial_date_recurring_requires_recurrence_type():
    with pytest.raises(ValueError):
        initial_execution_date(date(2024, 5, 1), OrderType.RECURRING)


def test_continuation_one_time_completes():
    status, upcoming = continuation(OrderType.ONE_TIME, None, date(2024, 1, 1), 1)

    assert status == ScheduledOrderStatus.COMPLETED
    assert upcoming is None


def test_continuation_recurring_advances():
    status, upcoming = continuation(
        OrderType.RECURRING, RecurrenceType.WEEKLY, date(2024, 1, 8), 1, max_occurrences=3
    )

    assert status == ScheduledOrderStatus.ACTIVE
    assert upcoming == date(2024, 1, 15)


def test_continuation_stops_at_max_occurrences():
    status, upcoming = continuation(
        OrderType.RECURRING, RecurrenceType.WEEKLY, date(2024, 1, 22), 3, max_occurrences=3
    )

    assert status == ScheduledOrderStatus.COMPLETED
    assert upcoming is None


def test_continuation_stops_after_end_date():
    status, upcoming = continuation(
        OrderType.RECURRING,
        RecurrenceType.WEEKLY,
        date(2024, 1, 29),
        4,
        end_date=date(2024, 2, 1),
    )

    assert status == ScheduledOrderStatus.COMPLETED
    assert upcoming is None


def test_continuation_runs_on_end_date():
    """An occurrence falling exactly on the end date is still allowed."""
    status, upcoming = continuation(
        OrderType.RECURRING,
        RecurrenceType.DAILY,
        date(2024, 1, 31),
        1,
        end_date=date(2024, 2, 1),
    )

    assert status == ScheduledOrderStatus.ACTIVE
    assert upcoming == date(2024, 2, 1)
