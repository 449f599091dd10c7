"""Pydantic schemas for User CRUD."""

from __future__ import annotations

from pydantic import BaseModel, field_validator


class UserCreate(BaseModel):
    name: str
    email: str
    password: str

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        if len(v.strip()) > 100:
            raise ValueError("Name must not exceed 100 characters")
        return v


class UserUpdate(BaseModel):
    name: str
    email: str
    password: str | None = None


class UserRead(BaseModel):
    id: int
    name: str
    email: str
    role: int

    model_config = {"from_attributes": True}
