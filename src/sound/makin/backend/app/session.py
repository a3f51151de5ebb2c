import base64
import hashlib

from aiohttp_session.cookie_storage import EncryptedCookieStorage
from cryptography.fernet import Fernet

from sound.makin.backend.app.config import Settings


def session_fernet(secret: str) -> Fernet:
    """
    Fernet key derived from an arbitrary session secret.

    SESSION_SECRET is a passphrase rather than a Fernet key, so it is hashed to 32 bytes
    and base64-url encoded.
    """
    digest = hashlib.sha256(secret.encode("utf-8")).digest()
    return Fernet(base64.urlsafe_b64encode(digest))


def session_storage(settings: Settings) -> EncryptedCookieStorage:
    return EncryptedCookieStorage(
        session_fernet(settings.session_secret),
        cookie_name=settings.session_cookie_name,
        max_age=settings.session_max_age,
        httponly=True,
        samesite="lax",
        secure=settings.secure_cookies,
    )
