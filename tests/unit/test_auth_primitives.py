from datetime import UTC, datetime

import pytest

from nexus.domain.entities.user import UserEntity, UserRole
from nexus.domain.errors import InvalidTokenError
from nexus.infrastructure.auth.passwords import hash_password, verify_password
from nexus.infrastructure.auth.token_service import TokenService


def _user(**overrides):
    data = dict(
        id=7,
        first_name="Grace",
        last_name="Hopper",
        email="grace@example.com",
        password_hash="x",
        role=UserRole.INVESTOR,
        created_at=datetime.now(UTC),
    )
    data.update(overrides)
    return UserEntity(**data)


def test_password_hash_verifies_and_is_salted():
    first = hash_password("correct horse")
    second = hash_password("correct horse")
    assert first != second
    assert verify_password("correct horse", first)
    assert not verify_password("wrong horse", first)


@pytest.mark.parametrize("stored", ["", "not base64!!", "c2hvcnQ=", "$2b$10$legacybcrypt"])
def test_garbage_hashes_never_verify(stored):
    assert verify_password("anything", stored) is False


def test_token_round_trip_yields_claims():
    service = TokenService(secret="s", ttl_minutes=5)
    claims = service.verify(service.issue(_user()))
    assert claims.user_id == 7
    assert claims.email == "grace@example.com"
    assert claims.role is UserRole.INVESTOR


def test_token_without_expiry_when_ttl_is_zero():
    import jwt

    service = TokenService(secret="s", ttl_minutes=0)
    payload = jwt.decode(service.issue(_user()), "s", algorithms=["HS256"])
    assert "exp" not in payload


def test_token_from_other_secret_is_rejected():
    token = TokenService(secret="a").issue(_user())
    with pytest.raises(InvalidTokenError, match="Invalid token"):
        TokenService(secret="b").verify(token)


@pytest.mark.parametrize("token", [None, "", 123])
def test_missing_token_is_rejected(token):
    with pytest.raises(InvalidTokenError, match="Missing access token"):
        TokenService(secret="s").verify(token)


def test_token_with_unknown_role_is_rejected():
    import jwt

    token = jwt.encode({"userId": 1, "email": "e@example.com", "role": "admin"}, "s", algorithm="HS256")
    with pytest.raises(InvalidTokenError):
        TokenService(secret="s").verify(token)
