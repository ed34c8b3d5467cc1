"""
Scheduled order aggregate.

A user-defined template that the scheduler sweep turns into real orders,
once or on a recurring basis.

CRITICAL: This file must contain ZERO imports from:
- sqlalchemy
- pydantic
- fastapi
"""
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import List, Optional

from ..enums import ExecutionOutcome, OrderType, RecurrenceType, ScheduledOrderStatus
from ..exceptions import PolicyViolationError
from ..services.recurrence import continuation
from ..value_objects import CartItemSnapshot, ShippingAddress


@dataclass
class ScheduledOrderLine:
    """Snapshot line of a scheduled order with its materialized subtotal."""
    product_id: int
    product_name: str
    price: Decimal
    quantity: Optional[int] = None
    weight: Optional[Decimal] = None
    subtotal: Decimal = Decimal("0.00")
    id: Optional[int] = None


@dataclass(frozen=True)
class OrderExecutionHistory:
    """Audit record of one scheduler attempt. Never mutated."""
    status: ExecutionOutcome
    execution_date: datetime
    scheduled_order_id: Optional[int] = None
    executed_order_id: Optional[int] = None
    error_message: Optional[str] = None
    id: Optional[int] = None


@dataclass
class ScheduledOrder:
    """
    Scheduled order aggregate root.

    State machine:
        PENDING --(first due)--> ACTIVE | COMPLETED
        ACTIVE --(pause)--> PAUSED --(resume)--> ACTIVE
        PENDING | ACTIVE | PAUSED --(cancel)--> CANCELLED
        ACTIVE | PENDING --(last occurrence)--> COMPLETED
    """
    user_id: int
    order_name: str
    order_type: OrderType
    scheduled_date: date
    next_execution_date: date
    recurrence_type: Optional[RecurrenceType] = None
    scheduled_time: Optional[time] = None
    delivery_date: Optional[date] = None
    delivery_time: Optional[time] = None
    status: ScheduledOrderStatus = ScheduledOrderStatus.PENDING
    end_date: Optional[date] = None
    max_occurrences: Optional[int] = None
    current_occurrence: int = 0
    cart_snapshot: List[CartItemSnapshot] = field(default_factory=list)
    shipping_address: Optional[ShippingAddress] = None
    delivery_point: Optional[str] = None
    notes: Optional[str] = None
    lines: List[ScheduledOrderLine] = field(default_factory=list)
    execution_history: List[OrderExecutionHistory] = field(default_factory=list)

    # Concurrency control for the scheduler sweep
    version: int = 0
    claimed_at: Optional[datetime] = None

    id: Optional[int] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    DUE_STATUSES = (ScheduledOrderStatus.PENDING, ScheduledOrderStatus.ACTIVE)
    CANCELLABLE_STATUSES = (
        ScheduledOrderStatus.PENDING,
        ScheduledOrderStatus.ACTIVE,
        ScheduledOrderStatus.PAUSED,
    )
    DELETABLE_STATUSES = (ScheduledOrderStatus.PENDING, ScheduledOrderStatus.CANCELLED)

    @property
    def is_recurring(self) -> bool:
        return self.order_type == OrderType.RECURRING

    def is_due(self, today: date) -> bool:
        return self.status in self.DUE_STATUSES and self.next_execution_date <= today

    def is_claimed(self, now: datetime, ttl: timedelta) -> bool:
        """True while another sweep holds an unexpired execution lease."""
        return self.claimed_at is not None and self.claimed_at > now - ttl

    # =========================================================================
    # USER ACTIONS
    # =========================================================================

    def ensure_updatable(self) -> None:
        if self.status != ScheduledOrderStatus.PENDING:
            raise PolicyViolationError(
                f"Only pending scheduled orders can be updated (status: {self.status.value})"
            )

    def ensure_deletable(self) -> None:
        if self.status not in self.DELETABLE_STATUSES:
            raise PolicyViolationError(
                "Only pending or cancelled scheduled orders can be deleted "
                f"(status: {self.status.value})"
            )

    def cancel(self) -> None:
        if self.status not in self.CANCELLABLE_STATUSES:
            raise PolicyViolationError(
                f"Scheduled order cannot be cancelled from status {self.status.value}"
            )
        self._set_status(ScheduledOrderStatus.CANCELLED)

    def pause(self) -> None:
        if not self.is_recurring:
            raise PolicyViolationError("Only recurring orders can be paused")
        if self.status != ScheduledOrderStatus.ACTIVE:
            raise PolicyViolationError(
                f"Only active scheduled orders can be paused (status: {self.status.value})"
            )
        self._set_status(ScheduledOrderStatus.PAUSED)

    def resume(self) -> None:
        if self.status != ScheduledOrderStatus.PAUSED:
            raise PolicyViolationError(
                f"Only paused scheduled orders can be resumed (status: {self.status.value})"
            )
        self._set_status(ScheduledOrderStatus.ACTIVE)

    # =========================================================================
    # SCHEDULER OUTCOMES
    # =========================================================================

    def record_success(
        self, executed_order_id: Optional[int], executed_at: datetime, due_date: date
    ) -> None:
        """
        Register a materialized occurrence and advance the schedule.

        ``due_date`` is the execution date that was claimed. The next date is
        only advanced while the schedule still points at it, and a status set
        by the user in the meantime (PAUSED, CANCELLED) is kept unless the
        schedule has run out of occurrences.
        """
        self.execution_history.append(
            OrderExecutionHistory(
                status=ExecutionOutcome.SUCCESS,
                execution_date=executed_at,
                scheduled_order_id=self.id,
                executed_order_id=executed_order_id,
            )
        )
        self.current_occurrence += 1

        new_status, next_date = continuation(
            order_type=self.order_type,
            recurrence_type=self.recurrence_type,
            executed_date=due_date,
            current_occurrence=self.current_occurrence,
            end_date=self.end_date,
            max_occurrences=self.max_occurrences,
        )
        if next_date is not None and self.next_execution_date == due_date:
            self.next_execution_date = next_date

        if self.status == ScheduledOrderStatus.CANCELLED:
            pass
        elif self.status == ScheduledOrderStatus.PAUSED and new_status == ScheduledOrderStatus.ACTIVE:
            pass
        else:
            self._set_status(new_status)
        self.claimed_at = None

    def record_failure(self, error_message: str, executed_at: datetime) -> None:
        """Register a failed attempt; status and next date stay for a retry."""
        self.execution_history.append(
            OrderExecutionHistory(
                status=ExecutionOutcome.FAILED,
                execution_date=executed_at,
                scheduled_order_id=self.id,
                error_message=error_message,
            )
        )
        self.claimed_at = None

    def record_skip(self, reason: str, executed_at: datetime) -> None:
        self.execution_history.append(
            OrderExecutionHistory(
                status=ExecutionOutcome.SKIPPED,
                execution_date=executed_at,
                scheduled_order_id=self.id,
                error_message=reason,
            )
        )

    def _set_status(self, status: ScheduledOrderStatus) -> None:
        self.status = status
        self.updated_at = datetime.utcnow()
