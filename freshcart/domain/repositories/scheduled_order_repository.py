"""Repository interfaces for ScheduledOrder aggregate."""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta
from typing import List, Optional

from ..entities.scheduled_order import OrderExecutionHistory, ScheduledOrder
from ..enums import ScheduledOrderStatus


class ScheduledOrderRepository(ABC):
    """Abstract repository for ScheduledOrder persistence."""

    @abstractmethod
    async def add(self, schedule: ScheduledOrder) -> ScheduledOrder:
        """Persist a new scheduled order with its lines.

        Returns:
            The same schedule with database ids assigned
        """
        pass

    @abstractmethod
    async def save(self, schedule: ScheduledOrder) -> None:
        """Persist changes, append new history entries and bump ``version``.

        Args:
            schedule: Scheduled order to update

        Raises:
            ConcurrentModificationError: If the stored version differs from
                ``schedule.version``
        """
        pass

    @abstractmethod
    async def delete(self, schedule: ScheduledOrder) -> None:
        """Delete a scheduled order with its lines and history."""
        pass

    @abstractmethod
    async def find_by_id(
        self, schedule_id: int, for_update: bool = False
    ) -> Optional[ScheduledOrder]:
        """Retrieve a scheduled order.

        Args:
            schedule_id: Scheduled order id
            for_update: Lock the row until the transaction ends

        Returns:
            ScheduledOrder if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_user(self, user_id: int) -> List[ScheduledOrder]:
        """List a user's schedules by scheduled date, latest first."""
        pass

    @abstractmethod
    async def find_by_user_and_status(
        self, user_id: int, status: ScheduledOrderStatus
    ) -> List[ScheduledOrder]:
        """List a user's schedules in one status."""
        pass

    @abstractmethod
    async def find_by_user_and_date_range(
        self, user_id: int, start: date, end: date
    ) -> List[ScheduledOrder]:
        """List a user's schedules with scheduled date in ``[start, end]``, ascending."""
        pass

    @abstractmethod
    async def find_due(self, today: date) -> List[ScheduledOrder]:
        """Schedules in PENDING or ACTIVE with next execution on or before ``today``.

        Args:
            today: Reference date

        Returns:
            Due schedules ordered by next execution date ascending
        """
        pass

    @abstractmethod
    async def try_claim(
        self, schedule_id: int, expected_version: int, now: datetime, lease: timedelta
    ) -> bool:
        """Compare-and-swap claim of a schedule for execution.

        Succeeds only if the stored version still equals ``expected_version``
        and no unexpired lease is held. On success the version is bumped and
        ``claimed_at`` is set to ``now``.

        Returns:
            True if this caller now owns the execution
        """
        pass

    @abstractmethod
    async def find_history(self, schedule_id: int) -> List[OrderExecutionHistory]:
        """Execution audit trail of a schedule, newest first."""
        pass
