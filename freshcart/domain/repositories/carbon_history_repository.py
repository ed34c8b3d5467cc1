"""Repository interface for carbon footprint history."""

from abc import ABC, abstractmethod
from typing import List

from ..entities.carbon_footprint import CarbonFootprintHistory


class CarbonHistoryRepository(ABC):
    """Append-only store of per-order footprints."""

    @abstractmethod
    async def add(self, record: CarbonFootprintHistory) -> None:
        """Append a footprint record."""
        pass

    @abstractmethod
    async def find_by_user(self, user_id: int) -> List[CarbonFootprintHistory]:
        """All records of a user, oldest order first."""
        pass

    @abstractmethod
    async def find_by_order(self, order_id: int) -> List[CarbonFootprintHistory]:
        """Records referencing an order."""
        pass
