"""
Role flags, request identity and ownership scope.

Roles are bit-flags: ``ADMIN`` is exactly ``CUSTOMER | CHEF``, so an admin
satisfies every customer-gated and chef-gated route.  ``ANY`` (no bits)
is what an open route requires and what every role trivially holds.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntFlag
from typing import Union


class Role(IntFlag):
    ANY = 0
    CUSTOMER = 1
    CHEF = 2
    ADMIN = CUSTOMER | CHEF

    def has_flag(self, required: Role) -> bool:
        """True when this role's bits are a superset of *required*'s."""
        return self & required == required


def parse_role(value: int) -> Role:
    """Return the ``Role`` for *value*, raising ``ValueError`` on unknown bits."""
    if value < 0 or value & ~int(Role.ADMIN):
        raise ValueError(f"Unknown role value: {value}")
    return Role(value)


@dataclass(frozen=True)
class Identity:
    user_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role.has_flag(Role.ADMIN)


# ── Ownership scope ─────────────────────────────────────────────────
@dataclass(frozen=True)
class OwnedBy:
    user_id: int


class Unrestricted:
    """Scope of an admin acting on behalf of any customer."""

    _instance: Unrestricted | None = None

    def __new__(cls) -> Unrestricted:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNRESTRICTED"


UNRESTRICTED = Unrestricted()

Scope = Union[OwnedBy, Unrestricted]


def scope_for(identity: Identity) -> Scope:
    if identity.is_admin:
        return UNRESTRICTED
    return OwnedBy(identity.user_id)
