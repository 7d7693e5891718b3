"""Google sign-in using the OAuth 2.0 authorization code flow."""

import secrets
from urllib.parse import urlencode

import httpx

from ..config import GoogleOAuthSettings
from ..models import AuthenticatedUser


class OAuthError(Exception):
    """The identity provider rejected the login or returned an unusable answer"""

    pass


def new_state() -> str:
    return secrets.token_urlsafe(32)


class GoogleOAuthClient:
    def __init__(
        self,
        oauth_settings: GoogleOAuthSettings,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ):
        self._settings = oauth_settings
        self._transport = transport
        self._timeout = timeout

    def authorization_url(self, redirect_uri: str, state: str) -> str:
        params = {
            "client_id": self._settings.client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": " ".join(self._settings.scopes),
            "state": state,
        }
        return f"{self._settings.authorize_url}?{urlencode(params)}"

    async def fetch_user(self, code: str, redirect_uri: str) -> AuthenticatedUser:
        """
        Exchange an authorization code for the signed in user's identity.

        Raises:
            OAuthError: If the code exchange or the profile request fails
        """
        async with httpx.AsyncClient(
            transport=self._transport, timeout=self._timeout
        ) as client:
            try:
                token_response = await client.post(
                    self._settings.token_url,
                    data={
                        "code": code,
                        "client_id": self._settings.client_id,
                        "client_secret": self._settings.client_secret,
                        "redirect_uri": redirect_uri,
                        "grant_type": "authorization_code",
                    },
                    headers={"Accept": "application/json"},
                )
                token_response.raise_for_status()
                access_token = token_response.json().get("access_token")
                if not access_token:
                    raise OAuthError("Token response did not contain an access token")

                profile_response = await client.get(
                    self._settings.userinfo_url,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                profile_response.raise_for_status()
                profile = profile_response.json()
            except httpx.HTTPError as e:
                raise OAuthError(f"Request to identity provider failed: {e}") from e
            except ValueError as e:
                raise OAuthError(f"Identity provider returned invalid JSON: {e}") from e

        return self.user_from_profile(profile)

    @staticmethod
    def user_from_profile(profile: dict) -> AuthenticatedUser:
        user_id = profile.get("sub") or profile.get("id")
        if not user_id:
            raise OAuthError("Profile is missing a user id")
        display_name = profile.get("name") or profile.get("email") or str(user_id)
        return AuthenticatedUser(id=str(user_id), displayName=display_name)
