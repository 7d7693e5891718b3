from datetime import datetime, timedelta, timezone

from joserfc import jwt
from joserfc.errors import BadSignatureError, DecodeError
from joserfc.jwk import OctKey
from pydantic import BaseModel, ValidationError

from ..config import settings
from ..models import AuthenticatedUser

key = OctKey.import_key(settings.session.secret_key)


class SessionTokenError(Exception):
    """Session or state cookie could not be trusted"""

    pass


class SessionClaims(BaseModel):
    sub: str  # user id from the identity provider
    name: str  # display name
    exp: datetime


class StateClaims(BaseModel):
    state: str
    exp: datetime


def get_token_expiry(minutes: int) -> datetime:
    return datetime.now(timezone.utc) + timedelta(minutes=minutes)


def _encode(claims: dict) -> str:
    # Convert datetime to timestamp for JWT
    if isinstance(claims.get("exp"), datetime):
        claims["exp"] = claims["exp"].timestamp()
    return jwt.encode(
        header={"alg": settings.session.algorithm},
        claims=claims,
        key=key,
    )


def _decode(token: str) -> dict:
    try:
        payload = jwt.decode(token, key, [settings.session.algorithm])
    except (BadSignatureError, DecodeError):
        raise SessionTokenError("Could not decode session token")
    except Exception as e:
        raise SessionTokenError(f"Unexpected error decoding token: {e}")

    if payload.claims is None:
        raise SessionTokenError("Session token invalid: missing claims field")
    return payload.claims


def create_session_token(user: AuthenticatedUser) -> str:
    claims = SessionClaims(
        sub=user.id,
        name=user.displayName,
        exp=get_token_expiry(settings.session.expire_minutes),
    )
    return _encode(claims.model_dump())


def read_session_token(token: str) -> AuthenticatedUser:
    """
    Validate a session cookie value and return the user it was issued for.

    Raises:
        SessionTokenError: If the token is malformed, tampered with or expired
    """
    try:
        claims = SessionClaims.model_validate(_decode(token))
    except ValidationError as e:
        raise SessionTokenError(f"Session token invalid: {e}")

    if claims.exp < datetime.now(timezone.utc):
        raise SessionTokenError("Session expired")

    return AuthenticatedUser(id=claims.sub, displayName=claims.name)


def create_state_token(state: str) -> str:
    claims = StateClaims(
        state=state, exp=get_token_expiry(settings.session.state_expire_minutes)
    )
    return _encode(claims.model_dump())


def read_state_token(token: str) -> str:
    try:
        claims = StateClaims.model_validate(_decode(token))
    except ValidationError as e:
        raise SessionTokenError(f"State token invalid: {e}")

    if claims.exp < datetime.now(timezone.utc):
        raise SessionTokenError("Login attempt expired")

    return claims.state
