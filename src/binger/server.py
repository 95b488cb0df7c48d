"""HTTP server entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Create AppState via the Starlette lifespan context manager
- Register routes and translate handler results into JSON responses
- Start uvicorn
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

import httpx
import structlog
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.responses import JSONResponse
from starlette.routing import Route

import binger.handlers.health as t_health
import binger.handlers.home as t_home
import binger.handlers.search as t_search
import binger.handlers.view as t_view
from binger import __version__
from binger.config import Settings
from binger.embed import PREFERRED_SERVER_COOKIE
from binger.errors import BingerError, ErrorCode
from binger.fetcher import build_http_client
from binger.state import AppState, build_state
from binger.transport import AdminAuthMiddleware, resolve_admin_key, run_http_server

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable

    from starlette.requests import Request

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [*shared_processors, structlog.processors.JSONRenderer()]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Response helpers
# ---------------------------------------------------------------------------


def _state(request: Request) -> AppState:
    return request.app.state.binger


async def _respond(handler: str, result: Awaitable[Any]) -> JSONResponse:
    """Await a handler and serialise its result or its expected failure."""
    try:
        payload = await result
    except BingerError as exc:
        log.warning(
            "route_error",
            handler=handler,
            code=exc.code,
            message=exc.message,
            recoverable=exc.recoverable,
        )
        return JSONResponse(exc.to_dict(), status_code=400)
    except httpx.HTTPError as exc:
        log.error("route_upstream_error", handler=handler, error=str(exc), exc_info=True)
        error = BingerError(
            code=ErrorCode.UPSTREAM_UNAVAILABLE,
            message=f"Upstream request failed: {exc}",
            suggestion="The metadata or embed provider may be temporarily unavailable.",
            recoverable=True,
        )
        return JSONResponse(error.to_dict(), status_code=502)

    if isinstance(payload, tuple):
        status_code, body = payload
        return JSONResponse(body, status_code=status_code)
    return JSONResponse(payload)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


async def home(request: Request) -> JSONResponse:
    return await _respond("home", t_home.handle(_state(request)))


async def search(request: Request) -> JSONResponse:
    params = request.query_params
    return await _respond(
        "search", t_search.handle(params.get("q", ""), params.get("type"), _state(request))
    )


async def view(request: Request) -> JSONResponse:
    path = request.path_params
    return await _respond(
        "view",
        t_view.handle(
            path["imdb_id"],
            path["media_type"],
            _state(request),
            season=path.get("season"),
            episode=path.get("episode"),
            preferred_server=request.cookies.get(PREFERRED_SERVER_COOKIE),
        ),
    )


async def health_embed_domains(request: Request) -> JSONResponse:
    return await _respond(
        "health_embed_domains",
        t_health.handle_embed_domains(request.query_params.get("target"), _state(request)),
    )


async def health_app_url(request: Request) -> JSONResponse:
    return await _respond("health_app_url", t_health.handle_app_url(_state(request)))


async def clear_cache(request: Request) -> JSONResponse:
    return JSONResponse(t_home.handle_clear(_state(request)))


ROUTES = [
    Route("/", home),
    Route("/search", search),
    Route("/view/{imdb_id}/{media_type}", view),
    Route("/view/{imdb_id}/{media_type}/{season}/{episode}", view),
    Route("/health/embed-domains", health_embed_domains),
    Route("/health/app-url", health_app_url),
    Route("/admin/cache/clear", clear_cache, methods=["POST"]),
]


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def create_app(settings: Settings | None = None, *, state: AppState | None = None) -> Starlette:
    """Build the Starlette app.

    When ``state`` is given it is used as-is and the lifespan creates
    nothing; otherwise the lifespan owns the httpx client and AppState.
    """
    settings = settings or (state.settings if state is not None else Settings())

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncGenerator[None, None]:
        if state is not None:
            yield
            return

        http_client = build_http_client(settings.fetcher)
        app.state.binger = build_state(settings, http_client)
        log.info(
            "server_started",
            version=__version__,
            omdb_url=settings.omdb.api_url,
            vidsrc_domain=settings.embed.vidsrc_domain,
            multi_domain=settings.embed.multi_domain or None,
        )
        try:
            yield
        finally:
            await http_client.aclose()
            log.info("server_stopping")

    app = Starlette(
        routes=ROUTES,
        lifespan=lifespan,
        middleware=[
            Middleware(
                AdminAuthMiddleware,
                auth_enabled=settings.server.admin_auth_enabled,
                auth_key=resolve_admin_key(settings),
            )
        ],
    )
    if state is not None:
        app.state.binger = state
    return app


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def main() -> None:
    settings = Settings()
    _setup_logging(settings)
    run_http_server(create_app(settings), settings)


if __name__ == "__main__":
    main()
