"""
Spotify OAuth Client Implementation

This module implements the authorization code grant (RFC 6749 section 4.1) against the
Spotify Accounts service.

The flow has two stages:
1. Authorization (`authorize_url`): build the consent screen URL the browser is sent to.
   No local state is created and no `state` parameter is sent.
2. Exchange (`exchange_code`): trade the authorization code for an access and refresh
   token pair with a form-encoded POST to the token endpoint.

Tokens are never stored server-side. The caller forwards them to the frontend.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

from aiohttp import ClientSession, ContentTypeError, FormData
from pydantic import BaseModel, ConfigDict

from sound.makin.backend.app.config import Settings

logger = logging.getLogger(__name__)

SCOPES = [
    "streaming",
    "user-read-email",
    "user-read-private",
    "ugc-image-upload",
    "user-read-playback-state",
    "user-modify-playback-state",
    "user-read-currently-playing",
    "app-remote-control",
    "playlist-read-private",
    "playlist-read-collaborative",
    "playlist-modify-private",
    "playlist-modify-public",
    "user-follow-modify",
    "user-follow-read",
    "user-read-playback-position",
    "user-top-read",
    "user-read-recently-played",
    "user-library-modify",
    "user-library-read",
]
"""Fixed scope list requested on every login."""

SCOPE = " ".join(SCOPES)


class TokenPair(BaseModel):
    """Token endpoint response. Extra provider fields are kept but unused."""

    model_config = ConfigDict(extra="allow")

    access_token: str
    refresh_token: str
    token_type: Optional[str] = None
    expires_in: Optional[int] = None
    scope: Optional[str] = None


class TokenExchangeError(Exception):
    """The token endpoint answered with a non-2xx status."""

    def __init__(self, status: int, data: Any) -> None:
        super().__init__(f"Token exchange failed with status {status}")
        self.status = status
        self.data = data


def authorize_url(settings: Settings) -> str:
    query = urlencode(
        {
            "response_type": "code",
            "client_id": settings.spotify_client_id,
            "scope": SCOPE,
            "redirect_uri": settings.redirect_uri,
        }
    )
    return f"{settings.spotify_authorize_url}?{query}"


async def exchange_code(
    settings: Settings, http_session: ClientSession, code: Optional[str]
) -> TokenPair:
    """
    Exchange an authorization code for a token pair.

    A missing code is still sent (as an empty value) and left for the provider to
    reject.

    Raises:
        TokenExchangeError: The provider answered with a non-2xx status
        aiohttp.ClientError: The request could not be completed
        pydantic.ValidationError: The response body is missing a token
    """
    data = FormData(
        {
            "grant_type": "authorization_code",
            "code": code or "",
            "redirect_uri": settings.redirect_uri,
            "client_id": settings.spotify_client_id,
            "client_secret": settings.spotify_client_secret,
        }
    )

    async with http_session.post(settings.spotify_token_url, data=data) as response:
        if not 200 <= response.status < 300:
            body: Any
            try:
                body = await response.json()
            except (ContentTypeError, ValueError):
                body = await response.text()
            logger.warning(
                "Token exchange rejected: status=%s body=%s", response.status, body
            )
            raise TokenExchangeError(response.status, body)

        payload: Dict[str, Any] = await response.json(content_type=None)

    return TokenPair.model_validate(payload)


def token_fragment(token_pair: TokenPair) -> str:
    return urlencode(
        {
            "access_token": token_pair.access_token,
            "refresh_token": token_pair.refresh_token,
        }
    )
