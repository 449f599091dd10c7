"""
In-memory cache of verified bearer tokens.

Skips re-checking a token's signature on every request.  Entries leave
the cache lazily: an expired entry is dropped by the ``get`` that finds
it.  An optional size bound evicts the least recently used entry.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from tableside.core.permissions import Identity, Role

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CachedIdentity:
    user_id: int
    role: Role
    expires_at: datetime

    def to_identity(self) -> Identity:
        return Identity(user_id=self.user_id, role=self.role)


class TokenCache:
    """Thread-safe token → identity map with lazy expiry."""

    def __init__(
        self,
        max_size: int | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._max_size = max_size or None
        self._clock = clock
        self._lock = threading.Lock()
        self._tokens: OrderedDict[str, CachedIdentity] = OrderedDict()

    def put(self, token: str, user_id: int, role: Role, expires_at: datetime) -> None:
        entry = CachedIdentity(user_id=user_id, role=Role(role), expires_at=expires_at)
        with self._lock:
            if token in self._tokens:
                self._tokens.move_to_end(token)
            elif self._max_size is not None and len(self._tokens) >= self._max_size:
                self._tokens.popitem(last=False)
                logger.debug("Token cache full (%d), evicted oldest entry", self._max_size)
            self._tokens[token] = entry

    def get(self, token: str) -> CachedIdentity | None:
        with self._lock:
            entry = self._tokens.get(token)
            if entry is None:
                return None
            if self._clock() > entry.expires_at:
                del self._tokens[token]
                return None
            self._tokens.move_to_end(token)
            return entry

    def discard(self, token: str) -> None:
        with self._lock:
            self._tokens.pop(token, None)

    def sweep(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [t for t, e in self._tokens.items() if now > e.expires_at]
            for token in expired:
                del self._tokens[token]
        if expired:
            logger.info("Swept %d expired tokens from cache", len(expired))
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._tokens.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)

    def __contains__(self, token: object) -> bool:
        with self._lock:
            return token in self._tokens
