"""SQLAlchemy ORM models for ScheduledOrder aggregate."""

from datetime import datetime

from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Time,
)
from sqlalchemy.orm import relationship

from .base import Base


class ScheduledOrderModel(Base):
    """SQLAlchemy ORM model for scheduled_orders table."""

    __tablename__ = "scheduled_orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    order_name = Column(String(255), nullable=False)
    order_type = Column(String(20), nullable=False)
    recurrence_type = Column(String(20), nullable=True)

    scheduled_date = Column(Date, nullable=False)
    scheduled_time = Column(Time, nullable=True)
    delivery_date = Column(Date, nullable=True)
    delivery_time = Column(Time, nullable=True)

    status = Column(String(20), nullable=False, default="PENDING", index=True)
    next_execution_date = Column(Date, nullable=True, index=True)
    end_date = Column(Date, nullable=True)
    max_occurrences = Column(Integer, nullable=True)
    current_occurrence = Column(Integer, nullable=False, default=0)

    # Structured snapshots stored as JSON
    cart_snapshot = Column(JSON, nullable=True)
    shipping_address = Column(JSON, nullable=True)
    delivery_point = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    # Optimistic concurrency + execution lease
    version = Column(Integer, nullable=False, default=0)
    claimed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    items = relationship(
        "ScheduledOrderItemModel",
        back_populates="scheduled_order",
        cascade="all, delete-orphan",
        order_by="ScheduledOrderItemModel.id",
        lazy="selectin",
    )
    executions = relationship(
        "OrderExecutionHistoryModel",
        back_populates="scheduled_order",
        cascade="all, delete-orphan",
        order_by="OrderExecutionHistoryModel.id",
        lazy="selectin",
    )

    __mapper_args__ = {
        # UPDATE and DELETE match on the version that was loaded
        "version_id_col": version,
        "version_id_generator": False,
    }


class ScheduledOrderItemModel(Base):
    """SQLAlchemy ORM model for scheduled_order_items table."""

    __tablename__ = "scheduled_order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    scheduled_order_id = Column(
        Integer, ForeignKey("scheduled_orders.id"), nullable=False, index=True
    )
    product_id = Column(Integer, nullable=False)
    product_name = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=True)
    weight = Column(Numeric(10, 3), nullable=True)
    subtotal = Column(Numeric(10, 2), nullable=False)

    scheduled_order = relationship("ScheduledOrderModel", back_populates="items")


class OrderExecutionHistoryModel(Base):
    """SQLAlchemy ORM model for order_execution_history table (append-only)."""

    __tablename__ = "order_execution_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    scheduled_order_id = Column(
        Integer, ForeignKey("scheduled_orders.id"), nullable=False, index=True
    )
    executed_order_id = Column(Integer, nullable=True)
    execution_date = Column(DateTime, nullable=False, default=datetime.utcnow)
    status = Column(String(20), nullable=False)
    error_message = Column(Text, nullable=True)

    scheduled_order = relationship("ScheduledOrderModel", back_populates="executions")
