import logging
import traceback
from aiohttp import web

from sound.makin.backend.app.config import SettingsAppKey

logger = logging.getLogger(__name__)


@web.middleware
async def error_middleware(request: web.Request, handler):
    """
    Render errors as {"error": {...}} JSON.

    HTTP errors keep their own status, so unmatched paths answer 404. Redirects and other
    non-error HTTP exceptions pass through untouched. Anything else is a 500, with the
    exception type, message and traceback included only when the settings allow it.
    """
    try:
        return await handler(request)
    except web.HTTPException as e:
        if e.status < 400:
            raise
        return web.json_response(
            {"error": {"status": e.status, "message": e.text or e.reason}},
            status=e.status,
        )
    except Exception as e:
        logger.error(
            f"Unexpected error handling {request.method} {request.path}: "
            f"{type(e).__name__}: {str(e)}\n"
            f"Traceback:\n{traceback.format_exc()}"
        )

        error = {"status": 500, "message": "Internal Server Error"}

        settings = request.app.get(SettingsAppKey)
        if settings and settings.expose_errors:
            error.update(
                {
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                    "traceback": traceback.format_exc(),
                }
            )

        return web.json_response({"error": error}, status=500)
