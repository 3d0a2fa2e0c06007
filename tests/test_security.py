"""Tests for token minting and password hashing."""

from datetime import timedelta

from jose import jwt

from guide_api.core.config import settings
from guide_api.core.security import (create_access_token, decode_access_token,
                                     get_password_hash, verify_password)


def test_token_round_trip():
    token = create_access_token(42, name="neo", email="neo@example.com", roles=["Business", "Admin"])
    claims = decode_access_token(token)
    assert claims["sub"] == "42"
    assert claims["name"] == "neo"
    assert claims["email"] == "neo@example.com"
    assert claims["roles"] == ["Admin", "Business"]
    assert claims["type"] == "access"
    assert claims["exp"] - claims["iat"] == settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60


def test_expired_token_rejected():
    token = create_access_token(1, roles=["RegularUser"], expires_delta=timedelta(seconds=-5))
    assert decode_access_token(token) is None


def test_tampered_token_rejected():
    token = create_access_token(1, roles=["RegularUser"])
    head, _, sig = token.split(".")
    forged = jwt.encode({"sub": "1", "roles": ["Admin"], "type": "access"}, "wrong-key", algorithm="HS256")
    assert decode_access_token(f"{head}.{forged.split('.')[1]}.{sig}") is None
    assert decode_access_token(forged) is None


def test_non_access_token_rejected():
    token = jwt.encode({"sub": "1", "type": "refresh"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    assert decode_access_token(token) is None


def test_password_hash_and_verify():
    hashed = get_password_hash("open-sesame")
    assert hashed != "open-sesame"
    assert verify_password("open-sesame", hashed)
    assert not verify_password("open-sesame!", hashed)


def test_verify_against_unusable_hash():
    assert verify_password("anything", "not-a-hash") is False
    assert verify_password("anything", None) is False
