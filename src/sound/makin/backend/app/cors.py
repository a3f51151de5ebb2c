from typing import Dict, List, Optional
from urllib.parse import urlparse

from aiohttp import web

from sound.makin.backend.app.config import SettingsAppKey


def get_cors_headers(
    origin_value: Optional[str], allowed_origins: List[str]
) -> Dict[str, str]:
    """Return CORS headers for a request from origin_value."""
    headers = {
        "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE",
        "Access-Control-Allow-Headers": (
            "Keep-Alive, User-Agent, X-Requested-With, "
            "If-Modified-Since, Cache-Control, Content-Type, "
            "Authorization"
        ),
        "Vary": "Origin",
    }

    if origin_value:
        parsed = urlparse(origin_value)
        base = f"{parsed.scheme}://{parsed.netloc}" if parsed.scheme and parsed.netloc else origin_value

        if base in allowed_origins:
            headers["Access-Control-Allow-Origin"] = origin_value
            headers["Access-Control-Allow-Credentials"] = "true"

    return headers


@web.middleware
async def cors_middleware(request: web.Request, handler):
    settings = request.app[SettingsAppKey]
    headers = get_cors_headers(request.headers.get("Origin"), settings.origins)

    if (
        request.method == "OPTIONS"
        and "Access-Control-Request-Method" in request.headers
    ):
        return web.Response(status=204, headers=headers)

    response = await handler(request)
    response.headers.update(headers)
    return response
