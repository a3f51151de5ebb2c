"""
Shared test configuration and fixtures for the makin backend tests.

Provides settings backed by a per-test SQLite database, a stub Spotify token endpoint,
and an aiohttp test client for the full application.
"""

from typing import Any, Dict

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestClient, TestServer

from sound.makin.backend.app.config import Settings
from sound.makin.backend.app.server import start_web_server

TEST_CLIENT_ID = "test-client-id"
TEST_CLIENT_SECRET = "test-client-secret"
TEST_REDIRECT_URI = "https://backend.example.com/callback"
TEST_FRONTEND_CALLBACK = "https://frontend.example.com/auth/callback"

HOST_ENVIRONMENT = (
    "ALLOWED_ORIGINS",
    "API_PREFIX",
    "DEBUG",
    "MODELS_PATH",
    "ROUTES_PATH",
    "SENTRY_DSN",
    "SESSION_COOKIE_NAME",
    "SESSION_MAX_AGE",
    "SESSION_SECRET",
    "SPOTIFY_AUTHORIZE_URL",
    "STATIC_PATH",
)


class TokenEndpointStub:
    """
    Stand-in for the Spotify token endpoint.

    The code "VALID" yields a token pair, "MALFORMED" yields a 200 response without
    tokens, anything else is rejected with a 400 like the real endpoint does for
    unknown or reused codes.
    """

    def __init__(self) -> None:
        self.requests: list[Dict[str, Any]] = []
        self.url = ""

    async def handle_token(self, request: web.Request) -> web.Response:
        form = await request.post()
        self.requests.append(
            {
                "content_type": request.content_type,
                "form": dict(form),
            }
        )

        code = form.get("code")
        if code == "VALID":
            return web.json_response(
                {
                    "access_token": "A",
                    "token_type": "Bearer",
                    "scope": "streaming",
                    "expires_in": 3600,
                    "refresh_token": "B",
                }
            )
        if code == "MALFORMED":
            return web.json_response({"token_type": "Bearer"})
        return web.json_response(
            {"error": "invalid_grant", "error_description": "Invalid authorization code"},
            status=400,
        )

    def app(self) -> web.Application:
        app = web.Application()
        app.add_routes([web.post("/api/token", self.handle_token)])
        return app


@pytest_asyncio.fixture
async def token_endpoint():
    """Run the stub token endpoint on a local port."""
    stub = TokenEndpointStub()
    server = TestServer(stub.app())
    await server.start_server()
    stub.url = str(server.make_url("/api/token"))
    yield stub
    await server.close()


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'makin.db'}"


@pytest.fixture
def settings(monkeypatch, database_url, token_endpoint):
    """
    Settings pointing at the test database and stub token endpoint.

    Deployment variables that select directories or reporting are cleared so the
    bundled routes and models are used whatever the host environment sets.
    """
    for name in HOST_ENVIRONMENT:
        monkeypatch.delenv(name, raising=False)
    return Settings(
        environment="test",
        database_url=database_url,
        spotify_client_id=TEST_CLIENT_ID,
        spotify_client_secret=TEST_CLIENT_SECRET,
        spotify_token_url=token_endpoint.url,
        redirect_uri=TEST_REDIRECT_URI,
        frontend_callback=TEST_FRONTEND_CALLBACK,
    )


@pytest_asyncio.fixture
async def make_client():
    """Build a test client for the full application from a Settings object."""
    clients: list[TestClient] = []

    async def factory(settings: Settings) -> TestClient:
        app = await start_web_server(settings)
        client = TestClient(TestServer(app))
        await client.start_server()
        clients.append(client)
        return client

    yield factory

    for client in clients:
        await client.close()


@pytest_asyncio.fixture
async def client(make_client, settings):
    """Test client for the application with the bundled routes and models."""
    return await make_client(settings)
