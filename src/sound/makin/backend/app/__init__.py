"""
Application Layer

This package implements the web application layer, handling HTTP requests and responses
using the aiohttp framework.

Key Components:
- cli.py: Entry point for running the application
- server.py: Web server configuration and middleware setup
- config.py: Configuration management using Pydantic settings
- routing.py: Mounting of route modules under the API prefix
- errors.py: JSON error responses for HTTP and unhandled exceptions
- cors.py: CORS handling for cross-origin requests
- handlers/: Request handlers for the OAuth and internal endpoints

The application uses several middleware layers:
- CORS middleware for handling cross-origin requests
- Error middleware for JSON error bodies
- Sentry middleware for error reporting

It provides the following main endpoints:
- Spotify login and callback (/login, /callback)
- Internal health endpoints (/internal/*)
- Dynamically mounted API routes (/api/*)
"""
