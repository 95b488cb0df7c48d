"""Application state container.

AppState is created once at startup (inside the Starlette lifespan) and
handed to every request handler. It is the only place the caches live, so
a fresh AppState is a fresh set of caches.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from binger.cache import LatestContentCache
from binger.fetcher import Fetcher, RetryPolicy
from binger.omdb import OmdbClient
from binger.posters import PosterResolver

if TYPE_CHECKING:
    import httpx

    from binger.cache import Clock
    from binger.config import Settings
    from binger.fetcher import Sleep
    from binger.protocols import FetcherProtocol, MetadataProtocol


@dataclass
class AppState:
    """Holds all shared runtime state. Passed to every handler."""

    settings: Settings
    http_client: httpx.AsyncClient
    fetcher: FetcherProtocol
    omdb: MetadataProtocol
    posters: PosterResolver
    latest: LatestContentCache


def build_state(
    settings: Settings,
    http_client: httpx.AsyncClient,
    *,
    clock: Clock = time.monotonic,
    sleep: Sleep = asyncio.sleep,
) -> AppState:
    """Wire the fetcher, caches and resolvers around an existing client."""
    fetcher = Fetcher(
        http_client,
        RetryPolicy.from_settings(settings.fetcher),
        sleep=sleep,
        timeout=settings.fetcher.timeout_seconds,
    )
    omdb = OmdbClient(
        fetcher,
        settings.omdb,
        metadata_ttl=settings.cache.metadata_ttl_seconds,
        season_ttl=settings.cache.season_ttl_seconds,
        clock=clock,
    )
    return AppState(
        settings=settings,
        http_client=http_client,
        fetcher=fetcher,
        omdb=omdb,
        posters=PosterResolver(omdb, fetcher, settings.app.placeholder_poster),
        latest=LatestContentCache(settings.cache.latest_ttl_seconds, clock=clock),
    )
