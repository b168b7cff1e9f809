"""Authorization-code exchange against the configured OAuth provider."""
from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from linkbio.config import Settings

logger = logging.getLogger(__name__)


class OAuthExchangeError(Exception):
    pass


@dataclass(frozen=True)
class OAuthIdentity:
    email: str
    name: str | None = None
    avatar_url: str | None = None


class OAuthCodeExchanger:
    """Exchanges a callback ``code`` for the provider's user identity."""

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._settings = settings
        self._transport = transport

    async def __call__(self, code: str) -> OAuthIdentity:
        settings = self._settings
        if not settings.oauth_enabled:
            raise OAuthExchangeError("OAuth provider is not configured")

        token_data = {
            "grant_type": "authorization_code",
            "client_id": settings.oauth_client_id,
            "client_secret": settings.oauth_client_secret or "",
            "code": code,
            "redirect_uri": settings.oauth_redirect_uri or "",
        }
        try:
            async with httpx.AsyncClient(
                timeout=settings.oauth_timeout_seconds, transport=self._transport
            ) as client:
                token_response = await client.post(
                    settings.oauth_token_url,
                    data=token_data,
                    headers={"Accept": "application/json"},
                )
                if token_response.status_code != 200:
                    raise OAuthExchangeError(f"Token exchange failed: HTTP {token_response.status_code}")
                access_token = token_response.json().get("access_token")
                if not access_token:
                    raise OAuthExchangeError("No access token in provider response")

                user_response = await client.get(
                    settings.oauth_userinfo_url,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                if user_response.status_code != 200:
                    raise OAuthExchangeError(f"User info fetch failed: HTTP {user_response.status_code}")
                user_info = user_response.json()
        except httpx.HTTPError as exc:
            logger.warning("OAuth provider request failed: %s", exc)
            raise OAuthExchangeError(str(exc)) from exc

        email = user_info.get("email")
        if not email:
            raise OAuthExchangeError("Provider did not return an email address")
        return OAuthIdentity(
            email=email,
            name=user_info.get("name") or user_info.get("full_name"),
            avatar_url=user_info.get("picture") or user_info.get("avatar_url"),
        )
