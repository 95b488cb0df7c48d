"""HTTP transport and admin-route security middleware."""

from __future__ import annotations

import secrets
from typing import TYPE_CHECKING

import structlog
import uvicorn
from starlette.datastructures import Headers
from starlette.responses import JSONResponse

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Receive, Scope, Send

    from binger.config import Settings

log = structlog.get_logger()

ADMIN_PATH_PREFIX = "/admin"


class AdminAuthMiddleware:
    """Pure ASGI middleware guarding operational routes under ``/admin``.

    Requests outside the admin prefix pass straight through. Admin requests
    must carry ``Authorization: Bearer <admin key>`` when auth is enabled.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        auth_enabled: bool,
        auth_key: str | None = None,
    ) -> None:
        self.app = app
        self.auth_enabled = auth_enabled
        self.auth_key = auth_key

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if (
            scope["type"] == "http"
            and self.auth_enabled
            and scope["path"].startswith(ADMIN_PATH_PREFIX)
        ):
            headers = Headers(scope=scope)
            auth_header = headers.get("authorization", "")
            token = auth_header[7:] if auth_header.startswith("Bearer ") else ""
            if not self.auth_key or not secrets.compare_digest(token, self.auth_key):
                response = JSONResponse({"error": {"code": "UNAUTHORIZED"}}, status_code=401)
                await response(scope, receive, send)
                return

        await self.app(scope, receive, send)


def resolve_admin_key(settings: Settings) -> str | None:
    """Return the configured admin key, generating one if auth is on but no key is set."""
    auth_key: str | None = settings.server.admin_key or None

    if settings.server.admin_auth_enabled and not auth_key:
        auth_key = secrets.token_urlsafe(32)
        log.warning("admin_auth_key_auto_generated", auth_key=auth_key)

    if not settings.server.admin_auth_enabled:
        log.warning("admin_auth_disabled")

    return auth_key


def run_http_server(app: ASGIApp, settings: Settings) -> None:
    """Serve the application with uvicorn."""
    uvicorn.run(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,  # Disable uvicorn's default logging; structlog handles it
    )
