import logging
from aiohttp import web

from sound.makin.backend.app.config import (
    DatabaseAppKey,
    ModelsReportAppKey,
    RoutesReportAppKey,
)

logger = logging.getLogger(__name__)


async def handle_internal_ready(request: web.Request):
    routes_report = request.app.get(RoutesReportAppKey)
    models_report = request.app.get(ModelsReportAppKey)
    database = request.app.get(DatabaseAppKey)

    synced = database is not None and database.synced
    summary = {
        "routes": routes_report.summary() if routes_report else None,
        "models": models_report.summary() if models_report else None,
        "database_synced": synced,
    }

    ready = (
        routes_report is not None
        and routes_report.ok
        and models_report is not None
        and models_report.ok
        and synced
    )
    if not ready:
        logger.warning("Not ready: %s", summary)
        return web.json_response(summary, status=503)
    return web.json_response(summary)


async def handle_internal_alive(request: web.Request):
    return web.Response(status=200)
