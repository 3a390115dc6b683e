"""
Google OAuth2 sign-in.

Builds the consent URL, exchanges the authorization code for an access token
and fetches the Google profile of the signing-in user.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AsyncIterator, Optional
from urllib.parse import urlencode

import httpx

from buildboss.core.logging_config import get_logger
from buildboss.server.core.config import GoogleOAuthConfig, settings

logger = get_logger(__name__)

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"
SCOPES = ("profile", "email")


class GoogleOAuthError(Exception):
    """The code exchange or profile lookup failed."""


@dataclass
class GoogleProfile:
    google_id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar: Optional[str] = None


class GoogleOAuthClient:
    """Authorization-code flow against Google's OAuth2 endpoints."""

    def __init__(
        self,
        config: GoogleOAuthConfig,
        *,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.config = config
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def authorization_url(self, state: Optional[str] = None) -> str:
        params = {
            "client_id": self.config.client_id,
            "redirect_uri": self.config.callback_url,
            "response_type": "code",
            "scope": " ".join(SCOPES),
            "access_type": "online",
            "prompt": "select_account",
        }
        if state:
            params["state"] = state
        return f"{AUTHORIZE_URL}?{urlencode(params)}"

    async def fetch_profile(self, code: str) -> GoogleProfile:
        """Exchange ``code`` and return the user's Google profile.

        Raises:
            GoogleOAuthError: Google rejected the code or returned no e-mail
        """
        try:
            token_response = await self._client.post(
                TOKEN_URL,
                data={
                    "code": code,
                    "client_id": self.config.client_id,
                    "client_secret": self.config.client_secret,
                    "redirect_uri": self.config.callback_url,
                    "grant_type": "authorization_code",
                },
            )
            token_response.raise_for_status()
            access_token = token_response.json().get("access_token")
            if not access_token:
                raise GoogleOAuthError("Google returned no access token")

            profile_response = await self._client.get(
                USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"}
            )
            profile_response.raise_for_status()
        except httpx.HTTPError as e:
            raise GoogleOAuthError(f"Google OAuth request failed: {e}") from e

        data = profile_response.json()
        if not data.get("sub") or not data.get("email"):
            raise GoogleOAuthError("Google profile lacks id or e-mail")
        return GoogleProfile(
            google_id=str(data["sub"]),
            email=str(data["email"]).lower(),
            first_name=data.get("given_name"),
            last_name=data.get("family_name"),
            avatar=data.get("picture"),
        )

    async def close(self) -> None:
        await self._client.aclose()


async def get_google_oauth_client() -> AsyncIterator[Optional[GoogleOAuthClient]]:
    """FastAPI dependency: a client when Google sign-in is configured, otherwise ``None``."""
    config = settings.google
    if not config.is_configured:
        yield None
        return
    client = GoogleOAuthClient(config)
    try:
        yield client
    finally:
        await client.close()
