"""SQLAlchemy ORM model for carbon footprint history."""

from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Integer, Numeric

from .base import Base


class CarbonFootprintHistoryModel(Base):
    """
    SQLAlchemy ORM model for carbon_footprint_history table.

    ``order_id`` is a plain column, not a foreign key: records are kept
    when an order is removed.
    """

    __tablename__ = "carbon_footprint_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    order_id = Column(Integer, nullable=False, index=True)
    carbon_footprint_kg = Column(Numeric(10, 4), nullable=False)
    order_date = Column(Date, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
