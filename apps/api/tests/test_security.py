"""Tests for session token signing and secret rotation."""

import uuid

import jwt
import pytest

from medhub.core.config import settings
from medhub.core.security import create_session_token, decode_session_token


def test_token_round_trip_carries_optional_claims():
    user_id, org_id = uuid.uuid4(), uuid.uuid4()
    token = create_session_token(user_id, org_id=org_id, email="a@b.vn")

    claims = decode_session_token(token)

    assert claims["sub"] == str(user_id)
    assert claims["org_id"] == str(org_id)
    assert claims["email"] == "a@b.vn"
    assert "platform_role" not in claims


def test_previous_secret_still_accepted_during_rotation(monkeypatch):
    old_token = jwt.encode({"sub": "u1"}, "old-secret", algorithm="HS256")
    monkeypatch.setattr(settings, "JWT_SECRET_PREVIOUS", "old-secret")

    assert decode_session_token(old_token)["sub"] == "u1"


def test_unknown_secret_is_rejected(monkeypatch):
    monkeypatch.setattr(settings, "JWT_SECRET_PREVIOUS", "")
    forged = jwt.encode({"sub": "u1"}, "attacker-secret", algorithm="HS256")

    with pytest.raises(jwt.InvalidTokenError):
        decode_session_token(forged)
