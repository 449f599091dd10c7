"""
Payment lifecycle.

The subtotal is always priced server-side from the order's current items
and menu prices; callers only supply the tip.
"""

from __future__ import annotations

import logging
import math

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tableside.core.exceptions import InvalidInput, NotFound
from tableside.core.permissions import UNRESTRICTED, OwnedBy, Scope
from tableside.models.menu import Item
from tableside.models.order import OrderItem
from tableside.models.payment import Payment, PaymentStatus
from tableside.services.orders import get_order
from tableside.services.paging import page

logger = logging.getLogger(__name__)


def _payment_status(value: str) -> PaymentStatus:
    try:
        return PaymentStatus(value)
    except ValueError:
        raise InvalidInput("Payment status must be 'processing' or 'accepted'") from None


async def order_subtotal(db: AsyncSession, order_id: int) -> tuple[float, int]:
    """Return ``(subtotal, line_count)`` for the order at current prices."""
    result = await db.execute(
        select(
            func.coalesce(func.sum(Item.price * OrderItem.quantity), 0.0),
            func.count(OrderItem.id),
        )
        .select_from(OrderItem)
        .join(Item, Item.id == OrderItem.item_id)
        .where(OrderItem.order_id == order_id)
    )
    subtotal, lines = result.one()
    return round(float(subtotal), 2), int(lines)


async def create_payment(
    db: AsyncSession,
    order_id: int,
    tip: float,
    cashier_id: int | None,
    acting_user_id: int,
) -> Payment:
    if not math.isfinite(tip) or tip < 0:
        raise InvalidInput("Tip must be a non-negative amount")
    if cashier_id is not None and cashier_id <= 0:
        raise InvalidInput("Invalid cashier ID")

    order = await get_order(db, order_id, UNRESTRICTED)
    subtotal, lines = await order_subtotal(db, order_id)
    if lines == 0:
        raise InvalidInput("No items found for the order")

    payment = Payment(
        order_id=order_id,
        user_id=order.customer_id,
        subtotal=subtotal,
        tip=round(tip, 2),
        status=PaymentStatus.PROCESSING.value,
        cashier_id=cashier_id or acting_user_id,
        created_by=acting_user_id,
    )
    db.add(payment)
    await db.commit()
    await db.refresh(payment)
    logger.info(
        "Payment %s created for order %s: subtotal=%.2f tip=%.2f",
        payment.id, order_id, payment.subtotal, payment.tip,
    )
    return payment


async def get_payment(db: AsyncSession, payment_id: int, scope: Scope) -> Payment:
    query = select(Payment).where(Payment.id == payment_id)
    if isinstance(scope, OwnedBy):
        query = query.where(Payment.user_id == scope.user_id)
    payment = (await db.execute(query)).scalar_one_or_none()
    if payment is None:
        raise NotFound("Payment not found")
    return payment


async def list_payments(
    db: AsyncSession,
    scope: Scope,
    *,
    status: str | None = None,
    customer_id: int | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> list[Payment]:
    limit, offset = page(limit, offset)
    query = select(Payment)
    if isinstance(scope, OwnedBy):
        query = query.where(Payment.user_id == scope.user_id)
    elif customer_id is not None:
        query = query.where(Payment.user_id == customer_id)
    if status:
        query = query.where(Payment.status == _payment_status(status).value)
    query = query.order_by(Payment.id.desc()).limit(limit).offset(offset)
    return list((await db.execute(query)).scalars().all())


async def update_payment_status(db: AsyncSession, payment_id: int, status: str) -> None:
    new_status = _payment_status(status)
    result = await db.execute(
        update(Payment)
        .where(Payment.id == payment_id)
        .values(status=new_status.value)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise NotFound("Payment not found")
    await db.commit()
    logger.info("Payment %s marked %s", payment_id, new_status.value)
