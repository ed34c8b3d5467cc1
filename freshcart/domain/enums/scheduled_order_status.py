"""
Scheduled Order Enums.

Values for schedule type, recurrence, status and execution outcomes.
"""
from enum import Enum


class OrderType(str, Enum):
    """Whether a schedule fires once or repeatedly."""

    ONE_TIME = "ONE_TIME"
    RECURRING = "RECURRING"


class RecurrenceType(str, Enum):
    """Recurrence period for RECURRING schedules."""

    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class ScheduledOrderStatus(str, Enum):
    """Scheduled order status values."""

    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class ExecutionOutcome(str, Enum):
    """Outcome of a single scheduler attempt."""

    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"
