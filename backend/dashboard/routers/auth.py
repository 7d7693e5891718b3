from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from ..auth.google import GoogleOAuthClient, OAuthError, new_state
from ..auth.session import (
    SessionTokenError,
    create_session_token,
    create_state_token,
    read_state_token,
)
from ..config import settings
from ..dependencies import get_oauth_client, get_session_user
from ..logger import logger
from ..models import AuthenticatedUser

router = APIRouter(tags=["auth"])


def _home() -> RedirectResponse:
    return RedirectResponse("/", status_code=302)


@router.get("/auth/google")
async def google_login(
    request: Request,
    oauth: GoogleOAuthClient = Depends(get_oauth_client),
) -> RedirectResponse:
    state = new_state()
    redirect_uri = str(request.url_for("google_callback"))
    response = RedirectResponse(oauth.authorization_url(redirect_uri, state))
    response.set_cookie(
        settings.session.state_cookie_name,
        create_state_token(state),
        max_age=settings.session.state_expire_minutes * 60,
        httponly=True,
        samesite="lax",
        secure=settings.session.https_only,
    )
    return response


@router.get("/auth/google/callback", name="google_callback")
async def google_callback(
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    oauth: GoogleOAuthClient = Depends(get_oauth_client),
) -> RedirectResponse:
    """
    Finish the Google login.
    Every failure sends the browser back home without a session.
    """
    state_cookie = request.cookies.get(settings.session.state_cookie_name)

    response = _home()
    response.delete_cookie(settings.session.state_cookie_name)

    if not code or not state or not state_cookie:
        logger.warning("Google callback without code, state or state cookie")
        return response

    try:
        if read_state_token(state_cookie) != state:
            logger.warning("Google callback state mismatch")
            return response
        user = await oauth.fetch_user(code, str(request.url_for("google_callback")))
    except (SessionTokenError, OAuthError) as e:
        logger.warning(f"Google login failed: {e}")
        return response

    response.set_cookie(
        settings.session.cookie_name,
        create_session_token(user),
        max_age=settings.session.expire_minutes * 60,
        httponly=True,
        samesite="lax",
        secure=settings.session.https_only,
    )
    logger.info(f"User {user.id} ({user.displayName}) logged in")
    return response


@router.get("/logout")
async def logout(
    user: Optional[AuthenticatedUser] = Depends(get_session_user),
) -> RedirectResponse:
    if user is not None:
        logger.info(f"User {user.id} ({user.displayName}) logged out")
    response = _home()
    response.delete_cookie(settings.session.cookie_name)
    return response
