"""
Payment endpoints.

Admins record payments and move them through processing → accepted.
Customers can read back the payments made against their own orders.
The total is always recomputed from the order's items and the tip.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tableside.api.v1.deps import get_db, require_admin, require_customer
from tableside.core.permissions import Identity, scope_for
from tableside.models.payment import Payment
from tableside.schemas.payment import (PaymentCreate, PaymentCreated,
                                       PaymentRead, PaymentStatusUpdate)
from tableside.schemas.token import MessageResponse
from tableside.services import payments as payment_service

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("", response_model=PaymentCreated, status_code=201)
async def create_payment(
    body: PaymentCreate,
    db: AsyncSession = Depends(get_db),
    admin: Identity = Depends(require_admin),
) -> PaymentCreated:
    payment = await payment_service.create_payment(
        db, body.order_id, body.tip, body.cashier_id, admin.user_id
    )
    return PaymentCreated(payment_id=payment.id, subtotal=payment.subtotal, total=payment.total)


@router.get("", response_model=list[PaymentRead])
async def list_payments(
    status: str | None = None,
    user_id: int | None = None,
    limit: int | None = None,
    offset: int | None = None,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_customer),
) -> list[Payment]:
    return await payment_service.list_payments(
        db, scope_for(identity), status=status, customer_id=user_id, limit=limit, offset=offset
    )


@router.get("/{payment_id}", response_model=PaymentRead)
async def get_payment(
    payment_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_customer),
) -> Payment:
    return await payment_service.get_payment(db, payment_id, scope_for(identity))


@router.patch("/{payment_id}", response_model=MessageResponse)
async def update_payment_status(
    payment_id: int,
    body: PaymentStatusUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> MessageResponse:
    await payment_service.update_payment_status(db, payment_id, body.status)
    return MessageResponse(message="Payment status updated")
