"""SQLAlchemy implementation of ScheduledOrderRepository."""

from datetime import date, datetime, timedelta
from typing import List, Optional

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from freshcart.domain.entities import OrderExecutionHistory, ScheduledOrder
from freshcart.domain.enums import ScheduledOrderStatus
from freshcart.domain.exceptions import ConcurrentModificationError
from freshcart.domain.repositories import ScheduledOrderRepository

from ..mappers import ExecutionHistoryMapper, ScheduledOrderMapper
from ..models import OrderExecutionHistoryModel, ScheduledOrderModel

_DUE_STATUSES = [status.value for status in ScheduledOrder.DUE_STATUSES]


class SqlAlchemyScheduledOrderRepository(ScheduledOrderRepository):
    """Concrete implementation of ScheduledOrderRepository using SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with SQLAlchemy session.

        Args:
            session: SQLAlchemy async session
        """
        self._session = session

    async def add(self, schedule: ScheduledOrder) -> ScheduledOrder:
        model = ScheduledOrderMapper.to_persistence(schedule)
        self._session.add(model)
        await self._session.flush()
        self._sync_entity(schedule, model)
        return schedule

    async def save(self, schedule: ScheduledOrder) -> None:
        """Persist changes and bump the version.

        The UPDATE only matches the version the schedule was loaded with,
        so a write made in between by another session or process is never
        overwritten.

        Args:
            schedule: Scheduled order to update

        Raises:
            ConcurrentModificationError: If the stored version moved on
        """
        model = await self._load(schedule.id)
        if model is None:
            raise LookupError(f"Scheduled order {schedule.id} does not exist")
        if model.version != schedule.version:
            raise ConcurrentModificationError("Scheduled order", schedule.id)

        ScheduledOrderMapper.update_persistence(schedule, model)
        model.version = schedule.version + 1
        try:
            await self._session.flush()
        except StaleDataError as e:
            raise ConcurrentModificationError("Scheduled order", schedule.id) from e
        self._sync_entity(schedule, model)

    async def delete(self, schedule: ScheduledOrder) -> None:
        """Delete a schedule with its lines and history.

        Raises:
            ConcurrentModificationError: If the stored version moved on
        """
        model = await self._load(schedule.id)
        if model is None:
            return
        if model.version != schedule.version:
            raise ConcurrentModificationError("Scheduled order", schedule.id)
        await self._session.delete(model)
        try:
            await self._session.flush()
        except StaleDataError as e:
            raise ConcurrentModificationError("Scheduled order", schedule.id) from e

    async def find_by_id(
        self, schedule_id: int, for_update: bool = False
    ) -> Optional[ScheduledOrder]:
        model = await self._load(schedule_id, for_update=for_update)
        return ScheduledOrderMapper.to_domain(model) if model else None

    async def find_by_user(self, user_id: int) -> List[ScheduledOrder]:
        return await self._list(
            select(ScheduledOrderModel)
            .where(ScheduledOrderModel.user_id == user_id)
            .order_by(ScheduledOrderModel.scheduled_date.desc(), ScheduledOrderModel.id.desc())
        )

    async def find_by_user_and_status(
        self, user_id: int, status: ScheduledOrderStatus
    ) -> List[ScheduledOrder]:
        return await self._list(
            select(ScheduledOrderModel)
            .where(
                ScheduledOrderModel.user_id == user_id,
                ScheduledOrderModel.status == status.value,
            )
            .order_by(ScheduledOrderModel.scheduled_date.desc(), ScheduledOrderModel.id.desc())
        )

    async def find_by_user_and_date_range(
        self, user_id: int, start: date, end: date
    ) -> List[ScheduledOrder]:
        return await self._list(
            select(ScheduledOrderModel)
            .where(
                ScheduledOrderModel.user_id == user_id,
                ScheduledOrderModel.scheduled_date >= start,
                ScheduledOrderModel.scheduled_date <= end,
            )
            .order_by(ScheduledOrderModel.scheduled_date, ScheduledOrderModel.id)
        )

    async def find_due(self, today: date) -> List[ScheduledOrder]:
        """Due schedules ordered by next execution date ascending.

        Args:
            today: Reference date

        Returns:
            List of due ScheduledOrder aggregates
        """
        return await self._list(
            select(ScheduledOrderModel)
            .where(
                ScheduledOrderModel.status.in_(_DUE_STATUSES),
                ScheduledOrderModel.next_execution_date <= today,
            )
            .order_by(ScheduledOrderModel.next_execution_date, ScheduledOrderModel.id)
        )

    async def try_claim(
        self, schedule_id: int, expected_version: int, now: datetime, lease: timedelta
    ) -> bool:
        """Compare-and-swap on ``version`` plus an execution lease.

        Returns:
            True if the row was claimed by this call
        """
        result = await self._session.execute(
            update(ScheduledOrderModel)
            .where(
                ScheduledOrderModel.id == schedule_id,
                ScheduledOrderModel.version == expected_version,
                ScheduledOrderModel.status.in_(_DUE_STATUSES),
                or_(
                    ScheduledOrderModel.claimed_at.is_(None),
                    ScheduledOrderModel.claimed_at < now - lease,
                ),
            )
            .values(version=expected_version + 1, claimed_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def find_history(self, schedule_id: int) -> List[OrderExecutionHistory]:
        result = await self._session.execute(
            select(OrderExecutionHistoryModel)
            .where(OrderExecutionHistoryModel.scheduled_order_id == schedule_id)
            .order_by(
                OrderExecutionHistoryModel.execution_date.desc(),
                OrderExecutionHistoryModel.id.desc(),
            )
        )
        return [ExecutionHistoryMapper.to_domain(model) for model in result.scalars().all()]

    async def _load(
        self, schedule_id: Optional[int], for_update: bool = False
    ) -> Optional[ScheduledOrderModel]:
        if schedule_id is None:
            return None
        query = select(ScheduledOrderModel).where(ScheduledOrderModel.id == schedule_id)
        if for_update:
            query = query.with_for_update()
        # Reload so a claim made through a bulk UPDATE is visible
        query = query.execution_options(populate_existing=True)
        result = await self._session.execute(query)
        return result.scalar_one_or_none()

    async def _list(self, query) -> List[ScheduledOrder]:
        result = await self._session.execute(query)
        return [ScheduledOrderMapper.to_domain(model) for model in result.scalars().all()]

    @staticmethod
    def _sync_entity(schedule: ScheduledOrder, model: ScheduledOrderModel) -> None:
        """Copy generated ids and the version back onto the entity."""
        fresh = ScheduledOrderMapper.to_domain(model)
        schedule.id = fresh.id
        schedule.version = fresh.version
        schedule.lines = fresh.lines
        schedule.execution_history = fresh.execution_history
