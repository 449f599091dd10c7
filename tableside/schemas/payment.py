"""Pydantic schemas for payments.

``PaymentCreate`` has no subtotal/total: both are computed
server-side.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class PaymentCreate(BaseModel):
    order_id: int
    tip: float = Field(default=0.0, allow_inf_nan=False)
    cashier_id: int | None = None


class PaymentCreated(BaseModel):
    payment_id: int
    subtotal: float
    total: float


class PaymentStatusUpdate(BaseModel):
    status: str


class PaymentRead(BaseModel):
    id: int
    order_id: int
    user_id: int
    subtotal: float
    tip: float
    total: float
    status: str
    cashier_id: int

    model_config = {"from_attributes": True}
