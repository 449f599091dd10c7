"""
JWT token creation / verification and password hashing (bcrypt).
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from tableside.core.config import settings
from tableside.core.permissions import Identity, parse_role

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class TokenRejected(Exception):
    """Bad signature, wrong algorithm, expired or malformed token."""


class ClaimsError(Exception):
    """Signature checked out but the payload is not shaped like ours."""


# ── Passwords ───────────────────────────────────────────────────────
def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def get_password_hash(plain: str) -> str:
    return pwd_context.hash(plain)


# ── JWT tokens ──────────────────────────────────────────────────────
def create_access_token(
    user_id: int,
    role: int,
    expires_delta: timedelta | None = None,
) -> tuple[str, datetime]:
    """Sign an access token; returns the token and its expiry."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    token = jwt.encode(
        {
            "user_id": int(user_id),
            "role": int(role),
            "iss": settings.JWT_ISSUER,
            "iat": now,
            "nbf": now,
            "exp": expire,
        },
        settings.JWT_SECRET,
        algorithm=settings.ALGORITHM,
    )
    return token, expire


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify *token* and return its claims, else raise ``TokenRejected``."""
    try:
        header = jwt.get_unverified_header(token)
    except JWTError as exc:
        raise TokenRejected("Malformed token") from exc
    # Only the configured HMAC algorithm is ever accepted
    if header.get("alg") != settings.ALGORITHM:
        raise TokenRejected(f"Unexpected signing method: {header.get('alg')}")
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.ALGORITHM],
            issuer=settings.JWT_ISSUER,
        )
    except JWTError as exc:
        raise TokenRejected(str(exc)) from exc


def claims_to_identity(claims: dict[str, Any]) -> tuple[Identity, datetime]:
    """Extract ``(Identity, expires_at)`` from verified claims."""
    user_id = claims.get("user_id")
    role = claims.get("role")
    exp = claims.get("exp")
    if (
        not isinstance(user_id, int)
        or isinstance(user_id, bool)
        or not isinstance(role, int)
        or not isinstance(exp, (int, float))
    ):
        raise ClaimsError("Token claims are missing or mistyped")
    try:
        parsed_role = parse_role(role)
    except ValueError as exc:
        raise ClaimsError(str(exc)) from exc
    expires_at = datetime.fromtimestamp(exp, tz=timezone.utc)
    return Identity(user_id=user_id, role=parsed_role), expires_at
