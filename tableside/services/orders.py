"""
Order lifecycle: open an order for a table, close it, read it back.

Writes are single guarded statements so that two customers seating at
the same table cannot both open an order, and so that a close only lands
on an open order the caller is allowed to touch.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy import DateTime, Integer, String, insert, literal, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from tableside.core.exceptions import Conflict, InvalidInput, NotFound
from tableside.core.permissions import OwnedBy, Scope
from tableside.models.order import Order, OrderStatus
from tableside.services.paging import page

logger = logging.getLogger(__name__)

MIN_TABLE = 1
MAX_TABLE = 100


def _visible(scope: Scope):
    """Extra WHERE clauses restricting orders to *scope*."""
    if isinstance(scope, OwnedBy):
        return (Order.customer_id == scope.user_id,)
    return ()


async def create_order(db: AsyncSession, customer_id: int, table_number: int) -> Order:
    if not MIN_TABLE <= table_number <= MAX_TABLE:
        raise InvalidInput(f"Table number must be between {MIN_TABLE} and {MAX_TABLE}")

    now = datetime.now(timezone.utc)
    existing = aliased(Order)
    open_on_table = (
        select(existing.id)
        .where(existing.table_number == table_number, existing.status == OrderStatus.OPEN.value)
        .exists()
    )
    guarded = select(
        literal(customer_id, Integer),
        literal(OrderStatus.OPEN.value, String),
        literal(table_number, Integer),
        literal(now, DateTime(timezone=True)),
    ).where(~open_on_table)
    stmt = (
        insert(Order.__table__)
        .from_select(["customer_id", "status", "table_number", "ordered_at"], guarded)
        .returning(Order.__table__.c.id)
    )

    try:
        order_id = (await db.execute(stmt)).scalar_one_or_none()
        if order_id is None:
            await db.rollback()
            raise Conflict(f"An open order for table {table_number} already exists")
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict(f"An open order for table {table_number} already exists") from None

    logger.info("Order %s opened on table %s by user %s", order_id, table_number, customer_id)
    return Order(
        id=order_id,
        customer_id=customer_id,
        status=OrderStatus.OPEN.value,
        table_number=table_number,
        ordered_at=now,
    )


async def close_order(db: AsyncSession, order_id: int, scope: Scope) -> None:
    """Close an open order.

    Missing, foreign and already-closed orders all yield ``NotFound`` so a
    customer cannot probe for orders that are not theirs.
    """
    stmt = (
        update(Order)
        .where(
            Order.id == order_id,
            Order.status == OrderStatus.OPEN.value,
            *_visible(scope),
        )
        .values(status=OrderStatus.CLOSED.value)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    if result.rowcount == 0:
        await db.rollback()
        raise NotFound("Order not found")
    await db.commit()
    logger.info("Order %s closed (%r)", order_id, scope)


async def get_order(db: AsyncSession, order_id: int, scope: Scope) -> Order:
    result = await db.execute(select(Order).where(Order.id == order_id, *_visible(scope)))
    order = result.scalar_one_or_none()
    if order is None:
        raise NotFound("Order not found")
    return order


async def list_orders(
    db: AsyncSession,
    scope: Scope,
    *,
    status: str | None = None,
    table_number: int | None = None,
    on_date: date | None = None,
    customer_id: int | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> list[Order]:
    """Newest first.  An ``OwnedBy`` scope wins over *customer_id*."""
    limit, offset = page(limit, offset)
    query = select(Order)

    if isinstance(scope, OwnedBy):
        query = query.where(Order.customer_id == scope.user_id)
    elif customer_id is not None:
        if customer_id <= 0:
            raise InvalidInput("Invalid user ID")
        query = query.where(Order.customer_id == customer_id)

    if status:
        try:
            status = OrderStatus(status).value
        except ValueError:
            raise InvalidInput("Order status must be 'open' or 'closed'") from None
        query = query.where(Order.status == status)

    if table_number is not None:
        if table_number <= 0:
            raise InvalidInput("Invalid table number")
        query = query.where(Order.table_number == table_number)

    if on_date is not None:
        start = datetime.combine(on_date, time.min, tzinfo=timezone.utc)
        query = query.where(Order.ordered_at >= start, Order.ordered_at < start + timedelta(days=1))

    query = query.order_by(Order.ordered_at.desc(), Order.id.desc()).limit(limit).offset(offset)
    result = await db.execute(query)
    return list(result.scalars().all())
