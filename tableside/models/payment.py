"""
Payment model.

Only subtotal and tip are stored; ``total`` is always derived.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String

from tableside.db.base import Base


class PaymentStatus(str, enum.Enum):
    PROCESSING = "processing"
    ACCEPTED = "accepted"


class Payment(Base):
    __tablename__ = "payments"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    order_id: int = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)  # type: ignore[assignment]
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)  # type: ignore[assignment]  # order's customer
    subtotal: float = Column(Float, nullable=False)  # type: ignore[assignment]
    tip: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    status: str = Column(String(12), nullable=False, default=PaymentStatus.PROCESSING.value)  # type: ignore[assignment]
    cashier_id: int = Column(Integer, ForeignKey("users.id"), nullable=False)  # type: ignore[assignment]
    created_by: int = Column(Integer, ForeignKey("users.id"), nullable=False)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    @property
    def total(self) -> float:
        return round(self.subtotal + self.tip, 2)
