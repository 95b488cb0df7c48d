"""Home-page "latest movies / latest series" assembly.

Fetching both embed feeds and probing every poster is expensive, so the
assembled snapshot is kept in the latest-content cache for a day (or until
an operator invalidates it).
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from binger.models.media import LatestContent
from binger.parser import parse_feed_items

if TYPE_CHECKING:
    import httpx

    from binger.state import AppState

log = structlog.get_logger()


def _feed_result(response: httpx.Response, url: str) -> object:
    try:
        payload = response.json()
    except ValueError:
        log.warning("latest_feed_invalid_json", url=url)
        return []
    return payload.get("result") if isinstance(payload, dict) else []


async def load_latest_content(state: AppState) -> LatestContent:
    """Return the cached snapshot, building and caching it on a miss."""
    cached = state.latest.get()
    if cached is not None:
        log.debug("latest_cache_hit")
        return cached

    embed = state.settings.embed
    log.info(
        "latest_cache_miss",
        movies_url=embed.movies_feed_url,
        series_url=embed.series_feed_url,
    )

    movies_response, series_response = await asyncio.gather(
        state.fetcher.get(embed.movies_feed_url),
        state.fetcher.get(embed.series_feed_url),
    )
    movies = parse_feed_items(_feed_result(movies_response, embed.movies_feed_url))
    series = parse_feed_items(_feed_result(series_response, embed.series_feed_url))

    await asyncio.gather(
        state.posters.fetch_and_resolve_posters(movies),
        state.posters.fetch_and_resolve_posters(series),
    )

    snapshot = LatestContent(movies=movies, series=series)
    state.latest.set(snapshot)
    log.info("latest_cache_filled", movies=len(movies), series=len(series))
    return snapshot
