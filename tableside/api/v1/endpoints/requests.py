"""
Role-elevation request endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tableside.api.v1.deps import get_current_identity, get_db, require_admin
from tableside.core.permissions import Identity
from tableside.models.role_request import RequestStatus, RoleRequest
from tableside.schemas.role_request import RoleRequestCreate, RoleRequestRead
from tableside.schemas.token import MessageResponse
from tableside.services import role_requests as request_service

router = APIRouter(prefix="/requests", tags=["requests"])


@router.post("", response_model=RoleRequestRead, status_code=201)
async def create_request(
    body: RoleRequestCreate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> RoleRequest:
    return await request_service.create_request(db, identity.user_id, body.role)


@router.get("", response_model=list[RoleRequestRead])
async def list_requests(
    user_id: int | None = None,
    role: int | None = None,
    status: str | None = None,
    seen: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> list[RoleRequest]:
    return await request_service.list_requests(
        db,
        identity,
        user_id=user_id,
        role=role,
        status=status,
        seen=seen,
        limit=limit,
        offset=offset,
    )


@router.post("/{request_id}/grant", response_model=RoleRequestRead)
async def grant_request(
    request_id: int,
    db: AsyncSession = Depends(get_db),
    admin: Identity = Depends(require_admin),
) -> RoleRequest:
    return await request_service.decide_request(
        db, request_id, RequestStatus.GRANTED, admin.user_id
    )


@router.post("/{request_id}/reject", response_model=RoleRequestRead)
async def reject_request(
    request_id: int,
    db: AsyncSession = Depends(get_db),
    admin: Identity = Depends(require_admin),
) -> RoleRequest:
    return await request_service.decide_request(
        db, request_id, RequestStatus.REJECTED, admin.user_id
    )


@router.post("/{request_id}/seen", response_model=MessageResponse)
async def mark_request_seen(
    request_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> MessageResponse:
    await request_service.mark_request_seen(db, request_id, identity.user_id)
    return MessageResponse(message="Request marked as seen")
