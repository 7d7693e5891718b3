"""
Tests for signed session and login state cookies.
"""

from datetime import datetime, timedelta, timezone

import pytest
from joserfc import jwt
from joserfc.jwk import OctKey

from dashboard.auth.session import (
    SessionTokenError,
    create_session_token,
    create_state_token,
    key,
    read_session_token,
    read_state_token,
)
from dashboard.models import AuthenticatedUser

USER = AuthenticatedUser(id="1234567890", displayName="Notch")


def sign(claims: dict, signing_key=key) -> str:
    return jwt.encode({"alg": "HS256"}, claims, signing_key)


def test_session_round_trip():
    assert read_session_token(create_session_token(USER)) == USER


def test_expired_session_is_rejected():
    past = datetime.now(timezone.utc) - timedelta(minutes=1)
    token = sign({"sub": USER.id, "name": USER.displayName, "exp": past.timestamp()})

    with pytest.raises(SessionTokenError, match="expired"):
        read_session_token(token)


def test_session_signed_with_other_key_is_rejected():
    other_key = OctKey.import_key("another-secret-0123456789abcdef0123456789abcdef")
    future = datetime.now(timezone.utc) + timedelta(minutes=5)
    token = sign(
        {"sub": USER.id, "name": USER.displayName, "exp": future.timestamp()},
        other_key,
    )

    with pytest.raises(SessionTokenError):
        read_session_token(token)


def test_session_missing_claims_is_rejected():
    future = datetime.now(timezone.utc) + timedelta(minutes=5)
    token = sign({"sub": USER.id, "exp": future.timestamp()})

    with pytest.raises(SessionTokenError, match="invalid"):
        read_session_token(token)


@pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
def test_garbage_session_is_rejected(token):
    with pytest.raises(SessionTokenError):
        read_session_token(token)


def test_state_round_trip():
    assert read_state_token(create_state_token("random-state")) == "random-state"


def test_session_token_is_not_a_state_token():
    with pytest.raises(SessionTokenError):
        read_state_token(create_session_token(USER))
