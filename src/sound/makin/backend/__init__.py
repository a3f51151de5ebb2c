"""
makin backend

Backend for the makin sound web player. It brokers the Spotify OAuth login for the
frontend and serves an API assembled at startup from a directory of route modules, backed
by tables registered from a directory of model modules.

Key Components:
- app: Web application layer with request handlers and server configuration
- loader: Best-effort directory loader shared by route mounting and model registration
- model: Shared database handle and model registration
- models: Model modules, one register(database) function each
- routes: Route modules, one aiohttp RouteTableDef each, mounted under /api
- spotify: Spotify OAuth authorization code exchange

Startup Sequence:
1. Route modules are imported and mounted under the API prefix
2. The database engine and outbound HTTP session are created
3. Model modules register their tables and missing tables are created
4. The server starts accepting requests

Load failures in steps 1 and 3 do not stop the server. They are logged and reported by
the /internal/ready endpoint.
"""
