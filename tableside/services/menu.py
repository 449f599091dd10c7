"""
Menu catalog: tags and items.

Item writes touch two tables (``items`` and ``item_tags``) and run as one
transaction: a failure anywhere rolls the whole write back.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from sqlalchemy import (Boolean, Float, String, Text, delete, insert, literal,
                        or_, select, update)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from tableside.core.exceptions import Conflict, InvalidInput, NotFound
from tableside.models.menu import Item, Tag, item_tags
from tableside.services.paging import LIKE_ESCAPE, contains_pattern, page

logger = logging.getLogger(__name__)


# ── Tags ────────────────────────────────────────────────────────────
def _tag_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise InvalidInput("Tag name is required")
    return name


async def create_tag(db: AsyncSession, name: str) -> Tag:
    name = _tag_name(name)
    existing = aliased(Tag)
    taken = select(existing.id).where(existing.name == name).exists()
    stmt = (
        insert(Tag.__table__)
        .from_select(["name"], select(literal(name, String)).where(~taken))
        .returning(Tag.__table__.c.id)
    )
    try:
        tag_id = (await db.execute(stmt)).scalar_one_or_none()
        if tag_id is None:
            await db.rollback()
            raise Conflict(f"Tag with name '{name}' already exists")
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict(f"Tag with name '{name}' already exists") from None
    logger.info("Tag %s created: %s", tag_id, name)
    return Tag(id=tag_id, name=name)


async def get_tag(db: AsyncSession, tag_id: int) -> Tag:
    tag = (await db.execute(select(Tag).where(Tag.id == tag_id))).scalar_one_or_none()
    if tag is None:
        raise NotFound(f"Tag with id '{tag_id}' not found")
    return tag


async def edit_tag(db: AsyncSession, tag_id: int, name: str) -> Tag:
    name = _tag_name(name)
    tag = await get_tag(db, tag_id)
    if tag.name == name:
        return tag
    try:
        await db.execute(
            update(Tag)
            .where(Tag.id == tag_id)
            .values(name=name)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict(f"Tag with name '{name}' already exists") from None
    tag.name = name
    return tag


async def list_tags(db: AsyncSession) -> list[Tag]:
    return list((await db.execute(select(Tag).order_by(Tag.id))).scalars().all())


async def resolve_tags(db: AsyncSession, names: Sequence[str]) -> list[Tag]:
    """Map tag names to existing tags, preserving order; unknown names are rejected."""
    wanted = list(dict.fromkeys(n.strip() for n in names if n.strip()))
    if not wanted:
        return []
    found = {
        t.name: t
        for t in (await db.execute(select(Tag).where(Tag.name.in_(wanted)))).scalars().all()
    }
    for name in wanted:
        if name not in found:
            raise InvalidInput(f"Tag not found: {name}")
    return [found[n] for n in wanted]


# ── Items ───────────────────────────────────────────────────────────
def _check_item_fields(name: str, price: float) -> str:
    name = name.strip()
    if not name or not math.isfinite(price) or price <= 0:
        raise InvalidInput("Name and a positive price are required")
    return name


async def _replace_tags(db: AsyncSession, item_id: int, tags: Sequence[Tag]) -> None:
    await db.execute(delete(item_tags).where(item_tags.c.item_id == item_id))
    if tags:
        await db.execute(
            insert(item_tags),
            [{"item_id": item_id, "tag_id": t.id} for t in tags],
        )


async def create_item(
    db: AsyncSession,
    *,
    name: str,
    description: str,
    price: float,
    tag_names: Sequence[str],
    image_url: str,
    available: bool,
) -> Item:
    name = _check_item_fields(name, price)
    tags = await resolve_tags(db, tag_names)

    existing = aliased(Item)
    taken = select(existing.id).where(existing.name == name).exists()
    guarded = select(
        literal(name, String),
        literal(description, Text),
        literal(price, Float),
        literal(image_url, String),
        literal(available, Boolean),
    ).where(~taken)
    stmt = (
        insert(Item.__table__)
        .from_select(["name", "description", "price", "image_url", "available"], guarded)
        .returning(Item.__table__.c.id)
    )

    try:
        item_id = (await db.execute(stmt)).scalar_one_or_none()
        if item_id is None:
            raise Conflict(f"Item with name '{name}' already exists")
        await _replace_tags(db, item_id, tags)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict(f"Item with name '{name}' already exists") from None
    except Exception:
        await db.rollback()
        raise

    logger.info("Item %s created: %s (%d tags)", item_id, name, len(tags))
    return await get_item(db, item_id)


async def edit_item(
    db: AsyncSession,
    item_id: int,
    *,
    name: str,
    description: str,
    price: float,
    tag_names: Sequence[str],
    image_url: str,
    available: bool,
) -> Item:
    """Overwrite an item and fully replace its tag set."""
    name = _check_item_fields(name, price)
    tags = await resolve_tags(db, tag_names)

    other = aliased(Item)
    name_taken = select(other.id).where(other.name == name, other.id != item_id).exists()
    try:
        result = await db.execute(
            update(Item)
            .where(Item.id == item_id, ~name_taken)
            .values(
                name=name,
                description=description,
                price=price,
                image_url=image_url,
                available=available,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await db.rollback()
            if await db.get(Item, item_id) is None:
                raise NotFound(f"Item with id '{item_id}' not found")
            raise Conflict(f"Item with name '{name}' already exists")
        await _replace_tags(db, item_id, tags)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict(f"Item with name '{name}' already exists") from None
    except Exception:
        await db.rollback()
        raise

    logger.info("Item %s updated (%d tags)", item_id, len(tags))
    return await get_item(db, item_id)


async def get_item(db: AsyncSession, item_id: int) -> Item:
    result = await db.execute(
        select(Item).where(Item.id == item_id).execution_options(populate_existing=True)
    )
    item = result.scalar_one_or_none()
    if item is None:
        raise NotFound(f"Item with id '{item_id}' not found")
    return item


async def list_items(
    db: AsyncSession,
    *,
    tag_names: Sequence[str] = (),
    search: str | None = None,
    available: bool | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> list[Item]:
    """Items carrying any of *tag_names*, matching *search* in name or description."""
    limit, offset = page(limit, offset)
    query = select(Item)
    if tag_names:
        tags = await resolve_tags(db, tag_names)
        query = query.where(
            Item.id.in_(
                select(item_tags.c.item_id).where(item_tags.c.tag_id.in_([t.id for t in tags]))
            )
        )
    if search:
        pattern = contains_pattern(search)
        query = query.where(
            or_(
                Item.name.ilike(pattern, escape=LIKE_ESCAPE),
                Item.description.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
    if available is not None:
        query = query.where(Item.available.is_(available))
    query = query.order_by(Item.id).limit(limit).offset(offset)
    return list((await db.execute(query)).scalars().all())
