"""
FastAPI dependencies: authentication gate, role guards and database session.

``authenticate`` runs once per request (router-level dependency, cached by
FastAPI) and resolves the bearer token to an ``Identity`` through the token
cache, verifying the signature only on a cache miss.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from tableside.core.config import settings
from tableside.core.exceptions import Forbidden, InternalError, Unauthorized
from tableside.core.permissions import Identity, Role
from tableside.core.security import (ClaimsError, TokenRejected,
                                     claims_to_identity, decode_access_token)
from tableside.db.session import async_session_factory
from tableside.services.token_cache import TokenCache

logger = logging.getLogger(__name__)

# auto_error=False so a missing header falls through to the cookie
bearer_scheme = HTTPBearer(auto_error=False)


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Token cache ─────────────────────────────────────────────────────
def get_token_cache(request: Request) -> TokenCache:
    return request.app.state.token_cache


def _token_from_request(
    request: Request, credentials: HTTPAuthorizationCredentials | None
) -> str | None:
    # Priority: Header > Cookie
    if credentials is not None and credentials.credentials.strip():
        return credentials.credentials.strip()
    cookie = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if cookie:
        # Accept "Bearer <token>" as well as the raw token
        if cookie.startswith("Bearer "):
            cookie = cookie[len("Bearer "):]
        return cookie.strip() or None
    return None


# ── Authentication gate ─────────────────────────────────────────────
async def authenticate(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    cache: TokenCache = Depends(get_token_cache),
) -> Identity | None:
    """Resolve the caller's identity; ``None`` for anonymous requests."""
    token = _token_from_request(request, credentials)
    if token is None:
        return None

    cached = cache.get(token)
    if cached is not None:
        return cached.to_identity()

    try:
        claims = decode_access_token(token)
    except TokenRejected as exc:
        logger.debug("Token rejected: %s", exc)
        raise Unauthorized("Unauthorized") from None

    try:
        identity, expires_at = claims_to_identity(claims)
    except ClaimsError as exc:
        raise InternalError("Failed to process token claims") from exc

    cache.put(token, identity.user_id, identity.role, expires_at)
    return identity


# ── Authorization gate ──────────────────────────────────────────────
def authorize(identity: Identity | None, required: Role) -> None:
    """Raise when *identity* may not reach a route gated on *required*."""
    if required == Role.ANY:
        return
    if identity is None:
        raise Unauthorized()
    if not identity.role.has_flag(required):
        raise Forbidden()


def require_role(required: Role) -> Callable[..., Awaitable[Identity | None]]:
    """Dependency factory: gate a route on *required* role flags."""

    async def _guard(identity: Identity | None = Depends(authenticate)) -> Identity | None:
        authorize(identity, required)
        return identity

    _guard.__name__ = f"require_{required.name.lower()}"
    return _guard


async def get_current_identity(
    identity: Identity | None = Depends(authenticate),
) -> Identity:
    """Any role, but the caller must be signed in."""
    if identity is None:
        raise Unauthorized()
    return identity


require_customer = require_role(Role.CUSTOMER)
require_chef = require_role(Role.CHEF)
require_admin = require_role(Role.ADMIN)
optional_identity = require_role(Role.ANY)
