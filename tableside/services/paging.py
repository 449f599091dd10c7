"""Limit/offset validation and search patterns shared by the list operations."""

from __future__ import annotations

from tableside.core.config import settings
from tableside.core.exceptions import InvalidInput

LIKE_ESCAPE = "\\"


def page(limit: int | None, offset: int | None) -> tuple[int, int]:
    if limit is None:
        limit = settings.DEFAULT_PAGE_SIZE
    elif limit <= 0 or limit > settings.MAX_PAGE_SIZE:
        raise InvalidInput(f"Limit must be between 1 and {settings.MAX_PAGE_SIZE}")
    if offset is None:
        offset = 0
    elif offset < 0:
        raise InvalidInput("Offset must not be negative")
    return limit, offset


def contains_pattern(search: str) -> str:
    """``%search%`` with the caller's own wildcards matched literally."""
    escaped = (
        search.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"
