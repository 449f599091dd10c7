"""Pydantic schemas for orders and order items."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class OrderCreate(BaseModel):
    table_number: int


class OrderCreated(BaseModel):
    order_id: int


class OrderRead(BaseModel):
    id: int
    customer_id: int
    status: str
    table_number: int
    ordered_at: datetime

    model_config = {"from_attributes": True}


class OrderItemCreate(BaseModel):
    item_id: int
    quantity: int
    custom_instructions: str = ""


class OrderItemCreated(BaseModel):
    order_item_id: int


class OrderItemStatusUpdate(BaseModel):
    status: str


class OrderItemRead(BaseModel):
    id: int
    order_id: int
    item_id: int
    quantity: int
    custom_instructions: str
    status: str

    model_config = {"from_attributes": True}
