"""
Configuration Module for the makin backend

This module defines the configuration system for the backend, using Pydantic for settings
validation and dependency injection through AppKeys.

Settings are loaded from environment variables with defaults suitable for the deployed
service. All application components access settings and shared resources through typed
AppKeys to maintain clean dependency injection.

Key configuration areas include:
- Environment and debugging
- Listening address and session cookie
- Spotify OAuth client credentials and endpoints
- Frontend and callback URLs
- Dynamic route and model directories
- Database connection
"""

import os
from typing import Final, List, Optional
import logging
from pydantic import (
    AliasChoices,
    Field,
)
from pydantic_settings import BaseSettings
from aiohttp import web
from aiohttp import ClientSession

from sound.makin.backend.loader import LoadReport
from sound.makin.backend.model.base import Database


logger = logging.getLogger(__name__)

PACKAGE_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

DEFAULT_ROUTES_PATH = os.path.join(PACKAGE_ROOT, "routes")
"""Directory of route modules bundled with the package."""


class Settings(BaseSettings):
    """
    Application settings for the makin backend.

    Environment variables are automatically mapped to settings fields, with aliases
    provided where the deployment uses a different name. For example, the environment
    name can be set with either ENVIRONMENT or NODE_ENV.
    """

    # Environment and debugging settings
    debug: bool = False
    """
    Enable debug mode for verbose logging and error details.
    Set with DEBUG=true environment variable.
    """

    environment: str = Field(
        "development",
        validation_alias=AliasChoices("environment", "node_env"),
    )
    """
    Deployment environment name. "development" exposes exception details in
    error responses.
    Set with ENVIRONMENT or NODE_ENV environment variables.
    """

    allowed_origins: str = "https://makin-sound.vercel.app, https://accounts.spotify.com"
    """
    Comma-separated list of origins allowed for CORS.
    Set with ALLOWED_ORIGINS environment variable.
    """

    http_port: int = Field(alias="port", default=3005)
    """
    HTTP port for the service to listen on.
    Set with PORT environment variable.
    """

    http_host: Optional[str] = Field(alias="host", default=None)
    """
    Interface for the service to bind to. All interfaces when unset.
    Set with HOST environment variable.
    """

    # Session cookie settings
    session_secret: str = "default_secret"
    """
    Secret the session cookie encryption key is derived from.
    Set with SESSION_SECRET environment variable.
    """

    session_cookie_name: str = "SESSION_ID"
    """Name of the session cookie."""

    session_max_age: int = 30 * 86400  # 30 days
    """
    Lifetime of the session cookie in seconds.
    Set with SESSION_MAX_AGE environment variable.
    Default: 2592000 (30 days)
    """

    # Spotify OAuth client settings
    spotify_client_id: str = ""
    """Set with SPOTIFY_CLIENT_ID environment variable."""

    spotify_client_secret: str = ""
    """Set with SPOTIFY_CLIENT_SECRET environment variable."""

    spotify_authorize_url: str = "https://accounts.spotify.com/authorize"
    """Consent screen the browser is redirected to by /login."""

    spotify_token_url: str = "https://accounts.spotify.com/api/token"
    """Token endpoint used to exchange authorization codes."""

    redirect_uri: str = "https://makin-backend.vercel.app/callback"
    """
    Backend callback URL registered with Spotify.
    Set with REDIRECT_URI environment variable.
    """

    frontend_callback: str = "https://makin-sound.vercel.app/auth/callback"
    """
    Frontend URL the browser lands on after a successful exchange. Tokens are
    appended as a URL fragment.
    Set with FRONTEND_CALLBACK environment variable.
    """

    # Dynamic loading
    api_prefix: str = "/api"
    """Path prefix every route module is mounted under."""

    routes_path: str = DEFAULT_ROUTES_PATH
    """
    Directory of route modules.
    Set with ROUTES_PATH environment variable.
    """

    models_path: Optional[str] = None
    """
    Directory of model modules. Defaults to the bundled models package.
    Set with MODELS_PATH environment variable.
    """

    static_path: Optional[str] = None
    """Directory served under /static when set."""

    # Database
    database_url: str = Field(
        "postgresql+asyncpg://postgres:password@db/makin",
        validation_alias=AliasChoices("database_url", "pg_dsn"),
    )
    """
    SQLAlchemy async connection string.
    Set with DATABASE_URL or PG_DSN environment variables.
    """

    # Monitoring and error reporting
    sentry_dsn: Optional[str] = None
    """
    Sentry DSN for error reporting. Optional, no error reporting if not set.
    Set with SENTRY_DSN environment variable.
    """

    @property
    def origins(self) -> List[str]:
        return [
            origin.strip()
            for origin in self.allowed_origins.split(",")
            if origin.strip()
        ]

    @property
    def secure_cookies(self) -> bool:
        return self.environment == "production"

    @property
    def expose_errors(self) -> bool:
        return self.debug or self.environment == "development"


# Application context keys for dependency injection
SettingsAppKey: Final = web.AppKey("settings", Settings)
"""AppKey for accessing the application settings"""

DatabaseAppKey: Final = web.AppKey("database", Database)
"""AppKey for accessing the shared database handle and its registered models"""

SessionAppKey: Final = web.AppKey("http_session", ClientSession)
"""AppKey for accessing the shared aiohttp client session"""

RoutesReportAppKey: Final = web.AppKey("routes_report", LoadReport)
"""AppKey for the result of mounting route modules"""

ModelsReportAppKey: Final = web.AppKey("models_report", LoadReport)
"""AppKey for the result of registering model modules"""
