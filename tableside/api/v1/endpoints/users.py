"""
User endpoints: self-service registration and profile, admin listing.

- POST /users is open (new accounts are always customers).
- GET / PATCH /users/{id} accept any signed-in role but only for the
  caller's own account unless the caller is an admin.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tableside.api.v1.deps import (get_current_identity, get_db,
                                   optional_identity, require_admin)
from tableside.core.permissions import Identity
from tableside.models.user import User
from tableside.schemas.user import UserCreate, UserRead, UserUpdate
from tableside.services import users as user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserRead, status_code=201)
async def register_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
) -> User:
    """Create a customer account."""
    return await user_service.register_user(db, body.name, body.email, body.password)


@router.get("", response_model=list[UserRead])
async def list_users(
    search: str | None = None,
    role: int | None = None,
    limit: int | None = None,
    offset: int | None = None,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> list[User]:
    return await user_service.list_users(db, search=search, role=role, limit=limit, offset=offset)


@router.get("/me", response_model=UserRead)
async def read_current_user(
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> User:
    """Return profile of the currently authenticated user."""
    return await user_service.get_user(db, identity.user_id, identity)


@router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity | None = Depends(optional_identity),
) -> User:
    return await user_service.get_user(db, user_id, identity)


@router.patch("/{user_id}", response_model=UserRead)
async def edit_user(
    user_id: int,
    body: UserUpdate,
    db: AsyncSession = Depends(get_db),
    identity: Identity | None = Depends(optional_identity),
) -> User:
    return await user_service.edit_user(
        db, user_id, identity, name=body.name, email=body.email, password=body.password
    )
