"""
Recurrence rules for scheduled orders.

Pure date arithmetic: no clock access, no I/O.
"""
import calendar
from datetime import date, timedelta
from typing import Optional, Tuple

from ..enums import OrderType, RecurrenceType, ScheduledOrderStatus


def add_months(current: date, months: int = 1) -> date:
    """Add calendar months, clamping the day to the end of shorter months."""
    month_index = current.month - 1 + months
    year = current.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(current.day, last_day))


def next_date(current: date, recurrence_type: RecurrenceType) -> date:
    """
    Next execution date after ``current``.

    Examples:
        >>> next_date(date(2024, 1, 15), RecurrenceType.WEEKLY)
        datetime.date(2024, 1, 22)
        >>> next_date(date(2024, 1, 31), RecurrenceType.MONTHLY)
        datetime.date(2024, 2, 29)
    """
    if recurrence_type == RecurrenceType.DAILY:
        return current + timedelta(days=1)
    if recurrence_type == RecurrenceType.WEEKLY:
        return current + timedelta(weeks=1)
    if recurrence_type == RecurrenceType.MONTHLY:
        return add_months(current, 1)
    raise ValueError(f"Unsupported recurrence type: {recurrence_type}")


def initial_execution_date(
    scheduled_date: date,
    order_type: OrderType,
    recurrence_type: Optional[RecurrenceType] = None,
) -> date:
    """
    First execution date for a new schedule.

    One-time orders run on their scheduled date. Recurring orders use the
    scheduled date as the anchor and run one period later.
    """
    if order_type == OrderType.RECURRING:
        if recurrence_type is None:
            raise ValueError("Recurrence type is required for recurring orders")
        return next_date(scheduled_date, recurrence_type)
    return scheduled_date


def continuation(
    order_type: OrderType,
    recurrence_type: Optional[RecurrenceType],
    executed_date: date,
    current_occurrence: int,
    end_date: Optional[date] = None,
    max_occurrences: Optional[int] = None,
) -> Tuple[ScheduledOrderStatus, Optional[date]]:
    """
    Decide what happens to a schedule after a successful occurrence.

    Args:
        order_type: ONE_TIME or RECURRING
        recurrence_type: Period for recurring schedules
        executed_date: Execution date that just ran
        current_occurrence: Occurrence count including the one that just ran
        end_date: Last allowed execution date
        max_occurrences: Maximum number of occurrences

    Returns:
        (status, next execution date); the date is None when the schedule
        is finished
    """
    if order_type != OrderType.RECURRING or recurrence_type is None:
        return ScheduledOrderStatus.COMPLETED, None

    upcoming = next_date(executed_date, recurrence_type)
    if end_date is not None and upcoming > end_date:
        return ScheduledOrderStatus.COMPLETED, None
    if max_occurrences is not None and current_occurrence >= max_occurrences:
        return ScheduledOrderStatus.COMPLETED, None
    return ScheduledOrderStatus.ACTIVE, upcoming
