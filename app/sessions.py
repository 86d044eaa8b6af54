import logging
import secrets
from typing import Optional, Sequence

import itsdangerous
from starlette.middleware.sessions import SessionMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp, Receive, Scope, Send

from app.config import Settings

logger = logging.getLogger(__name__)

SESSION_COOKIE = "auth"


class RotatingSessionMiddleware(SessionMiddleware):
    """
    Signed cookie sessions that still accept cookies signed with the previous
    key. New cookies are always signed with the current key.
    """

    def __init__(self, app: ASGIApp, secret_key: str, previous_key: Optional[str] = None, **kwargs):
        super().__init__(app, secret_key=secret_key, **kwargs)
        keys = [previous_key, secret_key] if previous_key else [secret_key]
        # itsdangerous signs with the last key and verifies against all of them
        self.signer = itsdangerous.TimestampSigner(keys)


class SessionRequiredMiddleware:
    """
    Rejects requests to protected paths with a bare 401 when the session
    carries no identity. Runs inside the session middleware and ahead of
    routing, so the request body is never read.
    """

    def __init__(self, app: ASGIApp, protected_paths: Sequence[str], user_key: str = "user"):
        self.app = app
        self.protected_paths = tuple(protected_paths)
        self.user_key = user_key

    def _is_protected(self, path: str) -> bool:
        return any(path == p or path.startswith(p + "/") for p in self.protected_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and self._is_protected(scope["path"]):
            if not scope.get("session", {}).get(self.user_key):
                logger.info("User Unauthenticated")
                await Response(status_code=401)(scope, receive, send)
                return
        await self.app(scope, receive, send)


def session_options(settings: Settings) -> dict:
    signing_key = settings.session_signing_key
    if not signing_key:
        logger.warning("SESSION_SIGNING_KEY not set, sessions will not survive a restart")
        signing_key = secrets.token_urlsafe(64)
    return {
        "secret_key": signing_key,
        "previous_key": settings.session_signing_key_old,
        "session_cookie": SESSION_COOKIE,
        "max_age": settings.session_max_age,
        "path": "/",
        "same_site": "strict",
        "https_only": settings.session_https_only,
    }
