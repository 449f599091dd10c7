"""
Role-elevation requests: pending → granted | rejected, plus a per-user
seen/unseen flag the requester flips once they have read the outcome.
"""

from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tableside.core.config import settings
from tableside.core.exceptions import Conflict, Forbidden, InvalidInput, NotFound
from tableside.core.permissions import Identity, Role, parse_role
from tableside.models.role_request import RequestStatus, RoleRequest, SeenStatus
from tableside.models.user import User
from tableside.services.paging import page

logger = logging.getLogger(__name__)


def _requested_role(value: int) -> Role:
    try:
        role = parse_role(value)
    except ValueError:
        raise InvalidInput("Unknown role") from None
    if role == Role.ANY:
        raise InvalidInput("Role is required")
    return role


async def create_request(db: AsyncSession, user_id: int, role: int) -> RoleRequest:
    request = RoleRequest(
        user_id=user_id,
        role=int(_requested_role(role)),
        status=RequestStatus.PENDING.value,
        user_status=SeenStatus.UNSEEN.value,
    )
    db.add(request)
    await db.commit()
    await db.refresh(request)
    logger.info("User %s requested role %s (request %s)", user_id, request.role, request.id)
    return request


async def decide_request(
    db: AsyncSession,
    request_id: int,
    status: RequestStatus,
    admin_id: int,
) -> RoleRequest:
    """Grant or reject a pending request, recording the deciding admin."""
    if status not in (RequestStatus.GRANTED, RequestStatus.REJECTED):
        raise InvalidInput("A request can only be granted or rejected")

    result = await db.execute(
        update(RoleRequest)
        .where(RoleRequest.id == request_id, RoleRequest.status == RequestStatus.PENDING.value)
        .values(status=status.value, granted_by=admin_id)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        exists = await db.execute(select(RoleRequest.id).where(RoleRequest.id == request_id))
        if exists.scalar_one_or_none() is None:
            raise NotFound("Request not found")
        raise Conflict("Request has already been decided")

    request = (
        await db.execute(select(RoleRequest).where(RoleRequest.id == request_id))
    ).scalar_one()

    if status is RequestStatus.GRANTED and settings.APPLY_ROLE_ON_GRANT:
        await db.execute(
            update(User)
            .where(User.id == request.user_id)
            .values(role=User.role.op("|")(request.role))
            .execution_options(synchronize_session=False)
        )
        logger.info("Role %s applied to user %s", request.role, request.user_id)

    await db.commit()
    logger.info("Request %s %s by admin %s", request_id, status.value, admin_id)
    return request


async def mark_request_seen(db: AsyncSession, request_id: int, user_id: int) -> None:
    result = await db.execute(
        update(RoleRequest)
        .where(RoleRequest.id == request_id, RoleRequest.user_id == user_id)
        .values(user_status=SeenStatus.SEEN.value)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise NotFound("Request not found")
    await db.commit()


async def list_requests(
    db: AsyncSession,
    identity: Identity,
    *,
    user_id: int | None = None,
    role: int | None = None,
    status: str | None = None,
    seen: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> list[RoleRequest]:
    """Admins see everything; others see only their own unseen requests."""
    limit, offset = page(limit, offset)
    query = select(RoleRequest)

    if identity.is_admin:
        if user_id is not None:
            query = query.where(RoleRequest.user_id == user_id)
        if seen:
            try:
                query = query.where(RoleRequest.user_status == SeenStatus(seen).value)
            except ValueError:
                raise InvalidInput("Seen status must be 'seen' or 'unseen'") from None
    else:
        if user_id is not None and user_id != identity.user_id:
            raise Forbidden("You are not allowed to view requests for other users")
        query = query.where(
            RoleRequest.user_id == identity.user_id,
            RoleRequest.user_status == SeenStatus.UNSEEN.value,
        )

    if role:
        query = query.where(RoleRequest.role == int(_requested_role(role)))
    if status:
        try:
            query = query.where(RoleRequest.status == RequestStatus(status).value)
        except ValueError:
            raise InvalidInput("Request status must be pending, granted or rejected") from None

    query = query.order_by(RoleRequest.id).limit(limit).offset(offset)
    return list((await db.execute(query)).scalars().all())
