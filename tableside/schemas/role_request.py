"""Pydantic schemas for role-elevation requests."""

from __future__ import annotations

from pydantic import BaseModel


class RoleRequestCreate(BaseModel):
    role: int


class RoleRequestRead(BaseModel):
    id: int
    user_id: int
    role: int
    status: str
    user_status: str
    granted_by: int | None = None

    model_config = {"from_attributes": True}
