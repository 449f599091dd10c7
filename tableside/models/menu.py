"""
Menu catalog models: tags and items (many-to-many).
"""

from __future__ import annotations

from sqlalchemy import (Boolean, Column, Float, ForeignKey, Integer, String,
                        Table, Text)
from sqlalchemy.orm import relationship

from tableside.db.base import Base

item_tags = Table(
    "item_tags",
    Base.metadata,
    Column("item_id", Integer, ForeignKey("items.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Tag(Base):
    __tablename__ = "tags"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(100), unique=True, nullable=False)  # type: ignore[assignment]


class Item(Base):
    __tablename__ = "items"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(200), unique=True, nullable=False)  # type: ignore[assignment]
    description: str = Column(Text, nullable=False, default="")  # type: ignore[assignment]
    price: float = Column(Float, nullable=False)  # type: ignore[assignment]
    image_url: str = Column(String(500), nullable=False, default="")  # type: ignore[assignment]
    available: bool = Column(Boolean, nullable=False, default=True)  # type: ignore[assignment]

    tags = relationship("Tag", secondary=item_tags, lazy="selectin", order_by="Tag.id")
