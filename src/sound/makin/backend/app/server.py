import logging
import os
from typing import (
    Optional,
)
from aiohttp import web
import aiohttp
import aiohttp_session
import sentry_sdk
from sentry_sdk.integrations.aiohttp import AioHttpIntegration

from sound.makin.backend.app.config import (
    DatabaseAppKey,
    ModelsReportAppKey,
    RoutesReportAppKey,
    SessionAppKey,
    Settings,
    SettingsAppKey,
)
from sound.makin.backend.app.cors import cors_middleware
from sound.makin.backend.app.errors import error_middleware
from sound.makin.backend.app.handlers.internal import (
    handle_internal_alive,
    handle_internal_ready,
)
from sound.makin.backend.app.handlers.oauth import (
    handle_callback,
    handle_login,
)
from sound.makin.backend.app.routing import mount_routes
from sound.makin.backend.app.session import session_storage
from sound.makin.backend.model.base import Database
from sound.makin.backend.model.setup import apply_models

logger = logging.getLogger(__name__)


async def background_tasks(app):
    """
    Create shared resources and register models before the server accepts requests.

    Everything before the yield runs during application startup, so the schema for all
    registered models exists by the time the listening socket is bound.
    """
    logger.info("Starting up")
    settings: Settings = app[SettingsAppKey]

    database = Database.from_url(settings.database_url)
    app[DatabaseAppKey] = database

    trace_config = aiohttp.TraceConfig()

    if settings.debug:

        async def on_request_start(
            session, trace_config_ctx, params: aiohttp.TraceRequestStartParams
        ):
            logging.info("Starting request: %s", params)

        async def on_request_end(session, trace_config_ctx, params):
            logging.info("Ending request: %s", params)

        trace_config.on_request_start.append(on_request_start)
        trace_config.on_request_end.append(on_request_end)

    app[SessionAppKey] = aiohttp.ClientSession(trace_configs=[trace_config])

    models_report = await apply_models(database, settings.models_path)
    app[ModelsReportAppKey] = models_report

    try:
        await database.sync()
    except Exception as e:
        logger.exception("Unable to create tables")
        sentry_sdk.capture_exception(e)

    if not (models_report.ok and app[RoutesReportAppKey].ok):
        logger.error(
            "Startup completed with load errors: routes=%s models=%s",
            app[RoutesReportAppKey].errors,
            models_report.errors,
        )

    logger.info("Startup complete")

    yield

    logger.info("Shutting down")

    try:
        await app[DatabaseAppKey].dispose()
    finally:
        await app[SessionAppKey].close()


@web.middleware
async def sentry_middleware(request: web.Request, handler):
    try:
        response = await handler(request)
        return response
    except web.HTTPException:
        raise
    except Exception as e:
        sentry_sdk.capture_exception(e)
        raise e


async def start_web_server(settings: Optional[Settings] = None):

    if settings is None:
        settings = Settings()
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            send_default_pii=True,
            environment=settings.environment,
            integrations=[AioHttpIntegration()],
        )
    app = web.Application(
        middlewares=[cors_middleware, error_middleware, sentry_middleware]
    )

    app[SettingsAppKey] = settings

    aiohttp_session.setup(app, session_storage(settings))

    if settings.static_path:
        app.add_routes(
            [
                web.static(
                    "/static",
                    os.path.abspath(settings.static_path),
                    append_version=True,
                )
            ]
        )

    app.add_routes([web.get("/login", handle_login)])
    app.add_routes([web.get("/callback", handle_callback)])

    app.add_routes(
        [
            web.get("/internal/alive", handle_internal_alive),
            web.get("/internal/ready", handle_internal_ready),
        ]
    )

    app[RoutesReportAppKey] = await mount_routes(
        app, settings.routes_path, settings.api_prefix
    )

    app.cleanup_ctx.append(background_tasks)

    return app
