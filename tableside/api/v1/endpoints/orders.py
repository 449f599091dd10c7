"""
Order endpoints: customers open, fill and close orders; the kitchen works
through order items by status.

The kitchen routes under ``/orders/items`` are declared before
``/orders/{order_id}`` so the literal segment is matched first.
"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tableside.api.v1.deps import get_db, require_chef, require_customer
from tableside.core.permissions import Identity, scope_for
from tableside.models.order import Order, OrderItem
from tableside.schemas.order import (OrderCreate, OrderCreated, OrderItemCreate,
                                     OrderItemCreated, OrderItemRead,
                                     OrderItemStatusUpdate, OrderRead)
from tableside.schemas.token import MessageResponse
from tableside.services import order_items as order_item_service
from tableside.services import orders as order_service

router = APIRouter(prefix="/orders", tags=["orders"])


# ── Kitchen ─────────────────────────────────────────────────────────
@router.get("/items", response_model=list[OrderItemRead])
async def list_order_items_by_status(
    status: str | None = Query(default=None, description="preparing | completed | pending"),
    limit: int | None = None,
    offset: int | None = None,
    db: AsyncSession = Depends(get_db),
    _chef: Identity = Depends(require_chef),
) -> list[OrderItem]:
    return await order_item_service.list_items_by_status(db, status, limit, offset)


@router.patch("/items/{order_item_id}", response_model=MessageResponse)
async def edit_order_item_status(
    order_item_id: int,
    body: OrderItemStatusUpdate,
    db: AsyncSession = Depends(get_db),
    _chef: Identity = Depends(require_chef),
) -> MessageResponse:
    await order_item_service.edit_order_item_status(db, order_item_id, body.status)
    return MessageResponse(message="Order item status updated")


# ── Orders ──────────────────────────────────────────────────────────
@router.post("", response_model=OrderCreated, status_code=201)
async def create_order(
    body: OrderCreate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_customer),
) -> OrderCreated:
    order = await order_service.create_order(db, identity.user_id, body.table_number)
    return OrderCreated(order_id=order.id)


@router.get("", response_model=list[OrderRead])
async def list_orders(
    status: str | None = None,
    table_number: int | None = None,
    on_date: date | None = Query(default=None, alias="date"),
    user_id: int | None = None,
    limit: int | None = None,
    offset: int | None = None,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_customer),
) -> list[Order]:
    """Customers see their own orders; admins see everyone's unless filtered."""
    return await order_service.list_orders(
        db,
        scope_for(identity),
        status=status,
        table_number=table_number,
        on_date=on_date,
        customer_id=user_id,
        limit=limit,
        offset=offset,
    )


@router.get("/{order_id}", response_model=OrderRead)
async def get_order(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_customer),
) -> Order:
    return await order_service.get_order(db, order_id, scope_for(identity))


@router.post("/{order_id}/close", response_model=MessageResponse)
async def close_order(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_customer),
) -> MessageResponse:
    await order_service.close_order(db, order_id, scope_for(identity))
    return MessageResponse(message="Order closed")


@router.post("/{order_id}/items", response_model=OrderItemCreated, status_code=201)
async def add_order_item(
    order_id: int,
    body: OrderItemCreate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_customer),
) -> OrderItemCreated:
    order_item = await order_item_service.create_order_item(
        db,
        order_id,
        identity.user_id,
        body.item_id,
        body.quantity,
        body.custom_instructions,
    )
    return OrderItemCreated(order_item_id=order_item.id)


@router.get("/{order_id}/items", response_model=list[OrderItemRead])
async def list_items_for_order(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_customer),
) -> list[OrderItem]:
    return await order_item_service.list_items_for_order(db, order_id, scope_for(identity))
