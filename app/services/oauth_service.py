"""
Authorization-code login against the external identity provider.

The provider is only spoken to over plain HTTP: the authorize URL is built
locally, the code is exchanged at the token endpoint, and the access token is
used once to read the userinfo endpoint.
"""

import logging
from typing import Optional
from urllib.parse import urlencode

import httpx

from app.config import Settings

logger = logging.getLogger(__name__)


class OAuthError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class OAuthClient:
    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport

    def authorization_url(self, state: str) -> str:
        query = urlencode(
            {
                "response_type": "code",
                "client_id": self.settings.oauth_client_id,
                "redirect_uri": self.settings.oauth_redirect_url,
                "scope": " ".join(self.settings.oauth_scopes),
                "state": state,
            }
        )
        sep = "&" if "?" in self.settings.oauth_auth_url else "?"
        return f"{self.settings.oauth_auth_url}{sep}{query}"

    async def fetch_username(self, code: str) -> str:
        """Exchange `code` for a token and return the user's preferred_username."""
        async with httpx.AsyncClient(transport=self._transport) as client:
            access_token = await self._exchange(client, code)

            try:
                resp = await client.get(
                    self.settings.oauth_user_info_url,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
            except httpx.HTTPError as exc:
                logger.warning("userinfo error: %s", exc)
                raise OAuthError(400, "failed to fetch user info") from exc

        if resp.status_code != 200:
            raise OAuthError(resp.status_code, f"userinfo responded with status {resp.status_code}")

        try:
            user_info = resp.json()
            return str(user_info.get("preferred_username") or "")
        except (ValueError, AttributeError) as exc:
            logger.warning("decode userinfo error: %s", exc)
            raise OAuthError(500, "decode userinfo failed") from exc

    async def _exchange(self, client: httpx.AsyncClient, code: str) -> str:
        try:
            resp = await client.post(
                self.settings.oauth_token_url,
                data={
                    "grant_type": "authorization_code",
                    "code": code,
                    "redirect_uri": self.settings.oauth_redirect_url,
                    "client_id": self.settings.oauth_client_id,
                    "client_secret": self.settings.oauth_client_secret,
                },
                headers={"Accept": "application/json"},
            )
            resp.raise_for_status()
            return resp.json()["access_token"]
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as exc:
            logger.warning("token exchange error: %s", exc)
            raise OAuthError(400, "token exchange failed") from exc
