"""
User accounts and credential checks.
"""

from __future__ import annotations

import logging

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tableside.core.config import settings
from tableside.core.exceptions import (Conflict, Forbidden, InvalidInput,
                                       NotFound, Unauthorized)
from tableside.core.permissions import Identity, Role, parse_role
from tableside.core.security import get_password_hash, verify_password
from tableside.models.user import User
from tableside.services.paging import LIKE_ESCAPE, contains_pattern, page

logger = logging.getLogger(__name__)


def _normalise(name: str, email: str) -> tuple[str, str]:
    name = name.strip()
    email = email.strip().lower()
    if not name or not email:
        raise InvalidInput("Missing required fields: name or email")
    if "@" not in email:
        raise InvalidInput("Invalid email address")
    return name, email


async def _find_by_email_or_name(db: AsyncSession, email: str, name: str) -> User | None:
    result = await db.execute(
        select(User).where(or_(User.email == email, User.name == name)).limit(1)
    )
    return result.scalar_one_or_none()


async def register_user(db: AsyncSession, name: str, email: str, password: str) -> User:
    """Create a customer account; roles are only raised through requests."""
    name, email = _normalise(name, email)
    if not password:
        raise InvalidInput("Missing required fields: name, password, or email")
    if await _find_by_email_or_name(db, email, name) is not None:
        raise Conflict("User with the same email or username already exists")

    user = User(
        name=name,
        email=email,
        hashed_password=get_password_hash(password),
        role=int(Role.CUSTOMER),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("User %s registered (%s)", user.id, user.name)
    return user


async def authenticate_user(db: AsyncSession, username: str, password: str) -> User:
    if not username or not password:
        raise InvalidInput("Username and password are required")
    result = await db.execute(select(User).where(User.name == username.strip()))
    user = result.scalar_one_or_none()
    if user is None or not verify_password(password, user.hashed_password):
        raise Unauthorized("Invalid username or password")
    return user


def _check_self_or_admin(user_id: int, identity: Identity | None, action: str) -> None:
    if identity is None:
        raise Unauthorized()
    if identity.user_id != user_id and not identity.is_admin:
        raise Forbidden(f"You are not allowed to {action} this user")


async def get_user(db: AsyncSession, user_id: int, identity: Identity | None) -> User:
    _check_self_or_admin(user_id, identity, "get")
    user = await db.get(User, user_id)
    if user is None:
        raise NotFound("User with the specified ID does not exist")
    return user


async def edit_user(
    db: AsyncSession,
    user_id: int,
    identity: Identity | None,
    *,
    name: str,
    email: str,
    password: str | None = None,
) -> User:
    _check_self_or_admin(user_id, identity, "edit")
    name, email = _normalise(name, email)

    clash = await _find_by_email_or_name(db, email, name)
    if clash is not None and clash.id != user_id:
        raise Conflict("User with the same email or username already exists")

    user = await db.get(User, user_id)
    if user is None:
        raise NotFound("User with the specified ID does not exist")

    user.name = name
    user.email = email
    if password:
        user.hashed_password = get_password_hash(password)
    await db.commit()
    await db.refresh(user)
    logger.info("User %s edited by %s", user_id, identity.user_id)  # type: ignore[union-attr]
    return user


async def list_users(
    db: AsyncSession,
    *,
    search: str | None = None,
    role: int | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> list[User]:
    limit, offset = page(limit, offset)
    query = select(User)
    if search:
        pattern = contains_pattern(search)
        query = query.where(
            or_(
                User.name.ilike(pattern, escape=LIKE_ESCAPE),
                User.email.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
    if role:
        try:
            flags = int(parse_role(role))
        except ValueError:
            raise InvalidInput("Unknown role") from None
        query = query.where(User.role.op("&")(flags) != 0)
    query = query.order_by(User.id).limit(limit).offset(offset)
    return list((await db.execute(query)).scalars().all())


async def seed_admin(db: AsyncSession) -> None:
    """Create the configured admin account on first startup."""
    existing = await _find_by_email_or_name(
        db, settings.FIRST_ADMIN_EMAIL, settings.FIRST_ADMIN_NAME
    )
    if existing is not None:
        return
    db.add(
        User(
            name=settings.FIRST_ADMIN_NAME,
            email=settings.FIRST_ADMIN_EMAIL,
            hashed_password=get_password_hash(settings.FIRST_ADMIN_PASSWORD),
            role=int(Role.ADMIN),
        )
    )
    await db.commit()
    logger.info(
        "Default admin created: %s (password: <redacted>)",
        settings.FIRST_ADMIN_EMAIL,
    )
