"""
Order & OrderItem models: the ordering domain.

At most one ``open`` order may exist per table; the partial unique index
backs up the guarded insert in ``services.orders``.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import (Column, DateTime, ForeignKey, Index, Integer, String,
                        Text, text)

from tableside.db.base import Base


class OrderStatus(str, enum.Enum):
    OPEN = "open"
    CLOSED = "closed"


class ItemStatus(str, enum.Enum):
    PREPARING = "preparing"
    COMPLETED = "completed"
    PENDING = "pending"


class Order(Base):
    __tablename__ = "orders"
    __table_args__ = (
        Index(
            "uq_orders_open_table",
            "table_number",
            unique=True,
            postgresql_where=text("status = 'open'"),
            sqlite_where=text("status = 'open'"),
        ),
        Index("ix_orders_customer_ordered_at", "customer_id", "ordered_at"),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    customer_id: int = Column(Integer, ForeignKey("users.id"), nullable=False)  # type: ignore[assignment]
    status: str = Column(String(10), nullable=False, default=OrderStatus.OPEN.value)  # type: ignore[assignment]
    table_number: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    ordered_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )


class OrderItem(Base):
    __tablename__ = "order_items"
    __table_args__ = (Index("ix_order_items_status", "status"),)

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    order_id: int = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)  # type: ignore[assignment]
    item_id: int = Column(Integer, ForeignKey("items.id"), nullable=False)  # type: ignore[assignment]
    quantity: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    custom_instructions: str = Column(Text, nullable=False, default="")  # type: ignore[assignment]
    status: str = Column(String(10), nullable=False, default=ItemStatus.PREPARING.value)  # type: ignore[assignment]
