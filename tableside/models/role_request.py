"""
RoleRequest model: a user's request to be elevated to another role.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from tableside.db.base import Base


class RequestStatus(str, enum.Enum):
    PENDING = "pending"
    GRANTED = "granted"
    REJECTED = "rejected"


class SeenStatus(str, enum.Enum):
    SEEN = "seen"
    UNSEEN = "unseen"


class RoleRequest(Base):
    __tablename__ = "requests"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)  # type: ignore[assignment]
    role: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    status: str = Column(String(10), nullable=False, default=RequestStatus.PENDING.value)  # type: ignore[assignment]
    user_status: str = Column(String(10), nullable=False, default=SeenStatus.UNSEEN.value)  # type: ignore[assignment]
    granted_by: int | None = Column(Integer, ForeignKey("users.id"), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
