"""
Spotify OAuth Handlers

This module implements the web request handlers for the Spotify login. The browser is sent
to the Spotify consent screen, comes back to the callback with an authorization code, and
is finally redirected to the frontend with the tokens in the URL fragment.

The handlers in this module provide the following endpoints:
- GET /login - Redirect to the Spotify consent screen
- GET /callback - Exchange the authorization code and redirect to the frontend
"""

import logging
from typing import Any, Dict, Optional

from aiohttp import web
import sentry_sdk

from sound.makin.backend.app.config import (
    SessionAppKey,
    SettingsAppKey,
)
from sound.makin.backend.spotify.oauth import (
    TokenExchangeError,
    authorize_url,
    exchange_code,
    token_fragment,
)

logger = logging.getLogger(__name__)


def serialize_error(error: BaseException) -> Dict[str, Any]:
    """
    Turn an exchange failure into a JSON-serializable object.

    Provider rejections include the upstream status and response body.
    """
    body: Dict[str, Any] = {
        "name": type(error).__name__,
        "message": str(error),
    }
    if isinstance(error, TokenExchangeError):
        body["status"] = error.status
        body["data"] = error.data
    return body


async def handle_login(request: web.Request):
    """
    Handle GET request to start the Spotify login.

    Query parameters are ignored, the authorization URL is the same for every caller.

    Raises:
        HTTPFound: To redirect to the Spotify authorize endpoint
    """
    settings = request.app[SettingsAppKey]
    raise web.HTTPFound(authorize_url(settings))


async def handle_callback(request: web.Request):
    """
    Handle the redirect back from Spotify.

    Query Parameters:
        code: Authorization code to exchange for tokens

    Returns:
        The serialized error, with a 200 status, when the exchange fails

    Raises:
        HTTPFound: To redirect to the frontend callback with the token pair in the
            URL fragment
    """
    code: Optional[str] = request.query.get("code", None)

    settings = request.app[SettingsAppKey]
    http_session = request.app[SessionAppKey]

    try:
        token_pair = await exchange_code(settings, http_session, code)
    except Exception as e:
        logger.exception("callback error")
        sentry_sdk.capture_exception(e)
        return web.json_response(serialize_error(e))

    raise web.HTTPFound(f"{settings.frontend_callback}#{token_fragment(token_pair)}")
