"""Pydantic schemas for the menu catalog (tags, items)."""

from __future__ import annotations

from pydantic import BaseModel, Field


class TagCreate(BaseModel):
    name: str


class TagRead(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class ItemWrite(BaseModel):
    name: str
    description: str = ""
    price: float = Field(allow_inf_nan=False)
    image_url: str = ""
    tags: list[str] = Field(default_factory=list)
    available: bool = True


class ItemRead(BaseModel):
    id: int
    name: str
    description: str
    price: float
    image_url: str
    available: bool
    tags: list[TagRead]

    model_config = {"from_attributes": True}
