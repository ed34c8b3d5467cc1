"""Unit of Work pattern for atomic transactions."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .repositories import (
    SqlAlchemyCarbonHistoryRepository,
    SqlAlchemyOrderRepository,
    SqlAlchemyScheduledOrderRepository,
)


class UnitOfWork:
    """
    Unit of Work pattern for atomic transactions.

    Responsibilities:
    1. Manage SQLAlchemy session lifecycle
    2. Atomic commit/rollback of all repository operations
    3. Lazy initialization of repositories
    """

    def __init__(self, session_factory: async_sessionmaker) -> None:
        """Initialize Unit of Work.

        Args:
            session_factory: SQLAlchemy async session factory
        """
        self._session_factory = session_factory
        self._session: Optional[AsyncSession] = None

        # Lazy-loaded repositories
        self._order_repository: Optional[SqlAlchemyOrderRepository] = None
        self._scheduled_order_repository: Optional[SqlAlchemyScheduledOrderRepository] = None
        self._carbon_history_repository: Optional[SqlAlchemyCarbonHistoryRepository] = None

    async def __aenter__(self) -> "UnitOfWork":
        """Start transaction scope."""
        self._session = self._session_factory()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Rollback on exception, then close the session."""
        if exc_type is not None:
            await self._session.rollback()
        await self._session.close()

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("UnitOfWork not initialized. Use async context manager.")
        return self._session

    @property
    def orders(self) -> SqlAlchemyOrderRepository:
        """Lazy-load order repository.

        Returns:
            SqlAlchemyOrderRepository instance
        """
        if self._order_repository is None:
            self._order_repository = SqlAlchemyOrderRepository(self.session)
        return self._order_repository

    @property
    def scheduled_orders(self) -> SqlAlchemyScheduledOrderRepository:
        """Lazy-load scheduled order repository.

        Returns:
            SqlAlchemyScheduledOrderRepository instance
        """
        if self._scheduled_order_repository is None:
            self._scheduled_order_repository = SqlAlchemyScheduledOrderRepository(self.session)
        return self._scheduled_order_repository

    @property
    def carbon_history(self) -> SqlAlchemyCarbonHistoryRepository:
        """Lazy-load carbon history repository.

        Returns:
            SqlAlchemyCarbonHistoryRepository instance
        """
        if self._carbon_history_repository is None:
            self._carbon_history_repository = SqlAlchemyCarbonHistoryRepository(self.session)
        return self._carbon_history_repository

    async def commit(self) -> None:
        """Commit all pending changes."""
        await self.session.commit()

    async def rollback(self) -> None:
        """Rollback all pending changes."""
        await self.session.rollback()


def create_uow(session_factory: async_sessionmaker) -> UnitOfWork:
    """Create a new Unit of Work instance.

    Args:
        session_factory: SQLAlchemy async session factory

    Returns:
        UnitOfWork instance
    """
    return UnitOfWork(session_factory)
