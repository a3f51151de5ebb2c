"""
Spotify Integration

This package provides the OAuth client side of the Spotify Accounts service.

Key Components:
- oauth.py: Authorization URL construction and authorization code exchange

The authentication flow follows these steps:
1. Redirect the browser to the Spotify consent screen with the fixed scope list
2. Receive the authorization code on the backend callback
3. Exchange the code for an access and refresh token pair
4. Hand both tokens to the frontend in a URL fragment

Tokens are not stored or refreshed by this service.
"""
