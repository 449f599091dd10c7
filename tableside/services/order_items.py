"""
OrderItem lifecycle: customers add dishes, the kitchen moves them along.
"""

from __future__ import annotations

import logging

from sqlalchemy import Integer, String, Text, insert, literal, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tableside.core.exceptions import InvalidInput, NotFound
from tableside.core.permissions import Scope
from tableside.models.menu import Item
from tableside.models.order import ItemStatus, Order, OrderItem, OrderStatus
from tableside.services.orders import get_order
from tableside.services.paging import page

logger = logging.getLogger(__name__)


def _item_status(value: str) -> ItemStatus:
    try:
        return ItemStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in ItemStatus)
        raise InvalidInput(f"Item status must be one of: {allowed}") from None


async def create_order_item(
    db: AsyncSession,
    order_id: int,
    customer_id: int,
    item_id: int,
    quantity: int,
    custom_instructions: str = "",
) -> OrderItem:
    """Add a menu item to an order the customer owns and that is still open.

    Ownership, existence and the open status are checked by the insert
    itself; any of them failing reads as ``NotFound``.
    """
    if item_id <= 0 or quantity <= 0:
        raise InvalidInput("Item ID and quantity must be greater than zero")

    item_exists = await db.execute(select(Item.id).where(Item.id == item_id))
    if item_exists.scalar_one_or_none() is None:
        raise NotFound("Item not found")

    guarded = select(
        literal(order_id, Integer),
        literal(item_id, Integer),
        literal(quantity, Integer),
        literal(ItemStatus.PREPARING.value, String),
        literal(custom_instructions, Text),
    ).where(
        Order.id == order_id,
        Order.customer_id == customer_id,
        Order.status == OrderStatus.OPEN.value,
    )
    stmt = (
        insert(OrderItem.__table__)
        .from_select(["order_id", "item_id", "quantity", "status", "custom_instructions"], guarded)
        .returning(OrderItem.__table__.c.id)
    )
    order_item_id = (await db.execute(stmt)).scalar_one_or_none()
    if order_item_id is None:
        await db.rollback()
        raise NotFound("Order not found")
    await db.commit()

    logger.info("Order item %s (item %s x%s) added to order %s", order_item_id, item_id, quantity, order_id)
    return OrderItem(
        id=order_item_id,
        order_id=order_id,
        item_id=item_id,
        quantity=quantity,
        custom_instructions=custom_instructions,
        status=ItemStatus.PREPARING.value,
    )


async def edit_order_item_status(db: AsyncSession, order_item_id: int, status: str) -> None:
    """Kitchen-side status change; not scoped to any customer."""
    new_status = _item_status(status)
    result = await db.execute(
        update(OrderItem)
        .where(OrderItem.id == order_item_id)
        .values(status=new_status.value)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise NotFound("Order item not found")
    await db.commit()
    logger.info("Order item %s marked %s", order_item_id, new_status.value)


async def list_items_for_order(db: AsyncSession, order_id: int, scope: Scope) -> list[OrderItem]:
    await get_order(db, order_id, scope)
    result = await db.execute(
        select(OrderItem).where(OrderItem.order_id == order_id).order_by(OrderItem.id)
    )
    return list(result.scalars().all())


async def list_items_by_status(
    db: AsyncSession,
    status: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> list[OrderItem]:
    """Kitchen queue: oldest first, across every order."""
    wanted = _item_status(status) if status else ItemStatus.PREPARING
    limit, offset = page(limit, offset)
    result = await db.execute(
        select(OrderItem)
        .where(OrderItem.status == wanted.value)
        .order_by(OrderItem.id)
        .limit(limit)
        .offset(offset)
    )
    return list(result.scalars().all())
