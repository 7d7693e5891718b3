from functools import lru_cache

from fastapi import Depends, Request

from .auth.google import GoogleOAuthClient
from .auth.session import SessionTokenError, read_session_token
from .config import settings
from .logger import logger
from .models import AuthenticatedUser
from .status import StatusProber


class LoginRequired(Exception):
    """Raised when a mutating operation is attempted without a session"""

    pass


def get_session_user(request: Request) -> AuthenticatedUser | None:
    """
    Session dependency.
    Returns the user stored in the session cookie, or None for anonymous clients.
    """
    token = request.cookies.get(settings.session.cookie_name)
    if not token:
        return None

    try:
        return read_session_token(token)
    except SessionTokenError as e:
        logger.debug(f"Ignoring session cookie: {e}")
        return None


def require_user(
    user: AuthenticatedUser | None = Depends(get_session_user),
) -> AuthenticatedUser:
    if user is None:
        raise LoginRequired()
    return user


@lru_cache
def get_prober() -> StatusProber:
    return StatusProber(settings.probe)


@lru_cache
def get_oauth_client() -> GoogleOAuthClient:
    return GoogleOAuthClient(settings.google)
