"""Tests for token signing/verification and password hashing."""

import base64
import json
from datetime import timedelta

import pytest
from jose import jwt

from tableside.core.config import settings
from tableside.core.permissions import Role
from tableside.core.security import (ClaimsError, TokenRejected,
                                     claims_to_identity, create_access_token,
                                     decode_access_token, get_password_hash,
                                     verify_password)


def test_password_hash_roundtrip():
    hashed = get_password_hash("hunter22")
    assert hashed != "hunter22"
    assert verify_password("hunter22", hashed)
    assert not verify_password("hunter23", hashed)


def test_token_carries_user_and_role():
    token, expires_at = create_access_token(42, Role.CHEF)
    identity, exp = claims_to_identity(decode_access_token(token))
    assert identity.user_id == 42
    assert identity.role is Role.CHEF
    assert int(exp.timestamp()) == int(expires_at.timestamp())


def test_expired_token_rejected():
    token, _ = create_access_token(1, Role.CUSTOMER, expires_delta=timedelta(seconds=-10))
    with pytest.raises(TokenRejected):
        decode_access_token(token)


def test_wrong_secret_rejected():
    token = jwt.encode({"user_id": 1, "role": 1, "iss": settings.JWT_ISSUER}, "other", algorithm="HS256")
    with pytest.raises(TokenRejected):
        decode_access_token(token)


def test_other_hmac_algorithm_rejected():
    token = jwt.encode(
        {"user_id": 1, "role": 1, "iss": settings.JWT_ISSUER},
        settings.JWT_SECRET,
        algorithm="HS512",
    )
    with pytest.raises(TokenRejected, match="signing method"):
        decode_access_token(token)


def test_garbage_rejected():
    with pytest.raises(TokenRejected):
        decode_access_token("not-a-token")


def test_wrong_issuer_rejected():
    token = jwt.encode(
        {"user_id": 1, "role": 1, "iss": "someone-else", "exp": 4102444800},
        settings.JWT_SECRET,
        algorithm=settings.ALGORITHM,
    )
    with pytest.raises(TokenRejected):
        decode_access_token(token)


@pytest.mark.parametrize(
    "claims",
    [
        {"role": 1, "exp": 4102444800},
        {"user_id": "1", "role": 1, "exp": 4102444800},
        {"user_id": 1, "role": "admin", "exp": 4102444800},
        {"user_id": 1, "role": 8, "exp": 4102444800},
        {"user_id": 1, "role": 1},
    ],
)
def test_misshapen_claims(claims):
    with pytest.raises(ClaimsError):
        claims_to_identity(claims)


def _unsigned_token(claims: dict) -> str:
    def segment(part: dict) -> str:
        return base64.urlsafe_b64encode(json.dumps(part).encode()).rstrip(b"=").decode()

    return f"{segment({'alg': 'none', 'typ': 'JWT'})}.{segment(claims)}."


def test_unsigned_token_rejected():
    token = _unsigned_token({"user_id": 1, "role": 3, "iss": settings.JWT_ISSUER, "exp": 4102444800})
    with pytest.raises(TokenRejected, match="signing method"):
        decode_access_token(token)
