"""
Menu catalog endpoints: tags and items.

Reads are open to customers (and so to admins); writes are admin-only.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tableside.api.v1.deps import get_db, require_admin, require_customer
from tableside.core.permissions import Identity
from tableside.models.menu import Item, Tag
from tableside.schemas.menu import ItemRead, ItemWrite, TagCreate, TagRead
from tableside.services import menu as menu_service

router = APIRouter(tags=["menu"])


# ── Tags ────────────────────────────────────────────────────────────
@router.post("/tags", response_model=TagRead, status_code=201)
async def create_tag(
    body: TagCreate,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> Tag:
    return await menu_service.create_tag(db, body.name)


@router.get("/tags", response_model=list[TagRead])
async def list_tags(
    db: AsyncSession = Depends(get_db),
    _user: Identity = Depends(require_customer),
) -> list[Tag]:
    return await menu_service.list_tags(db)


@router.get("/tags/{tag_id}", response_model=TagRead)
async def get_tag(
    tag_id: int,
    db: AsyncSession = Depends(get_db),
    _user: Identity = Depends(require_customer),
) -> Tag:
    return await menu_service.get_tag(db, tag_id)


@router.put("/tags/{tag_id}", response_model=TagRead)
async def edit_tag(
    tag_id: int,
    body: TagCreate,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> Tag:
    return await menu_service.edit_tag(db, tag_id, body.name)


# ── Items ───────────────────────────────────────────────────────────
@router.post("/items", response_model=ItemRead, status_code=201)
async def create_item(
    body: ItemWrite,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> Item:
    return await menu_service.create_item(
        db,
        name=body.name,
        description=body.description,
        price=body.price,
        tag_names=body.tags,
        image_url=body.image_url,
        available=body.available,
    )


@router.get("/items", response_model=list[ItemRead])
async def list_items(
    tags: str | None = Query(default=None, description="Comma-separated tag names"),
    search: str | None = None,
    available: bool | None = None,
    limit: int | None = None,
    offset: int | None = None,
    db: AsyncSession = Depends(get_db),
    _user: Identity = Depends(require_customer),
) -> list[Item]:
    tag_names = [t for t in (tags or "").split(",") if t.strip()]
    return await menu_service.list_items(
        db, tag_names=tag_names, search=search, available=available, limit=limit, offset=offset
    )


@router.get("/items/{item_id}", response_model=ItemRead)
async def get_item(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    _user: Identity = Depends(require_customer),
) -> Item:
    return await menu_service.get_item(db, item_id)


@router.put("/items/{item_id}", response_model=ItemRead)
async def edit_item(
    item_id: int,
    body: ItemWrite,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> Item:
    return await menu_service.edit_item(
        db,
        item_id,
        name=body.name,
        description=body.description,
        price=body.price,
        tag_names=body.tags,
        image_url=body.image_url,
        available=body.available,
    )
