"""SQLAlchemy implementation of CarbonHistoryRepository."""

from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from freshcart.domain.entities import CarbonFootprintHistory
from freshcart.domain.repositories import CarbonHistoryRepository

from ..mappers import CarbonHistoryMapper
from ..models import CarbonFootprintHistoryModel


class SqlAlchemyCarbonHistoryRepository(CarbonHistoryRepository):
    """Append-only carbon history backed by SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, record: CarbonFootprintHistory) -> None:
        self._session.add(CarbonHistoryMapper.to_persistence(record))
        await self._session.flush()

    async def find_by_user(self, user_id: int) -> List[CarbonFootprintHistory]:
        result = await self._session.execute(
            select(CarbonFootprintHistoryModel)
            .where(CarbonFootprintHistoryModel.user_id == user_id)
            .order_by(CarbonFootprintHistoryModel.order_date, CarbonFootprintHistoryModel.id)
        )
        return [CarbonHistoryMapper.to_domain(model) for model in result.scalars().all()]

    async def find_by_order(self, order_id: int) -> List[CarbonFootprintHistory]:
        result = await self._session.execute(
            select(CarbonFootprintHistoryModel)
            .where(CarbonFootprintHistoryModel.order_id == order_id)
            .order_by(CarbonFootprintHistoryModel.id)
        )
        return [CarbonHistoryMapper.to_domain(model) for model in result.scalars().all()]
