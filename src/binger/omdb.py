"""Cached OMDb lookups: title search / ID lookup, and season navigation.

OmdbClient owns two TTL caches:

- metadata: raw OMDb responses keyed by (query, search mode, media type)
- seasons:  parsed SeasonRecords keyed by (series id, season number)

Season N's neighbours are resolved through the same season cache, so
stepping through a series one season at a time costs at most one new
upstream call per step.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Any

import structlog

from binger.cache import (
    METADATA_TTL_SECONDS,
    SEASON_TTL_SECONDS,
    Clock,
    TTLCache,
    metadata_cache_key,
    season_cache_key,
)
from binger.models.media import SeasonDetail, SeasonRecord, SeriesDetail
from binger.parser import parse_episodes, parse_total_seasons

if TYPE_CHECKING:
    import httpx

    from binger.config import OmdbSettings
    from binger.protocols import FetcherProtocol

log = structlog.get_logger()

_JSON_HEADERS = {"Content-Type": "application/json"}


def build_omdb_params(api_key: str, query: str, search: bool, media_type: str) -> dict[str, str]:
    """``s=`` for title search, ``i=`` for IMDb-ID lookup; ``type`` only when given."""
    params = {"apikey": api_key}
    if media_type:
        params["type"] = media_type
    if search:
        params["s"] = query
    else:
        params["i"] = query
    return params


def _json_object(response: httpx.Response, **context: Any) -> dict[str, Any]:
    """Decode a JSON object body. Empty, invalid or non-object bodies give ``{}``."""
    if not response.content:
        return {}
    try:
        data = response.json()
    except ValueError:
        log.warning("omdb_invalid_json", status_code=response.status_code, **context)
        return {}
    return data if isinstance(data, dict) else {}


class OmdbClient:
    """OMDb metadata and season lookups fronted by short-TTL caches."""

    def __init__(
        self,
        fetcher: FetcherProtocol,
        settings: OmdbSettings,
        *,
        metadata_ttl: float = METADATA_TTL_SECONDS,
        season_ttl: float = SEASON_TTL_SECONDS,
        clock: Clock = time.monotonic,
    ) -> None:
        self._fetcher = fetcher
        self._settings = settings
        self._metadata: TTLCache[dict[str, Any]] = TTLCache(metadata_ttl, clock=clock)
        self._seasons: TTLCache[SeasonRecord] = TTLCache(season_ttl, clock=clock)

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    async def fetch_metadata(
        self, query: str, search: bool = True, media_type: str = ""
    ) -> dict[str, Any]:
        """Return the OMDb response for a title search or an IMDb-ID lookup.

        An empty query returns ``{}`` without touching the network or the
        cache. Transport failures (after retries) propagate to the caller.
        """
        if not query:
            return {}

        key = metadata_cache_key(query, search, media_type)
        cached = self._metadata.get(key)
        if cached is not None:
            log.debug("metadata_cache_hit", key=key)
            return cached

        log.debug("metadata_cache_miss", key=key)
        params = build_omdb_params(self._settings.api_key, query, search, media_type)
        response = await self._fetcher.get(
            self._settings.api_url, params=params, headers=_JSON_HEADERS
        )
        data = _json_object(response, key=key)
        self._metadata.set(key, data)
        return data

    # ------------------------------------------------------------------
    # Seasons
    # ------------------------------------------------------------------

    async def fetch_season_detail(self, series_id: str, season: int) -> SeriesDetail:
        """Resolve ``season`` of ``series_id`` together with its neighbours."""
        if not series_id:
            return SeriesDetail(total_seasons=0, current_season=SeasonDetail(season=0))

        current = await self._fetch_season(series_id, season)
        total = current.total_seasons

        has_prev = season > 1
        has_next = season < total
        prev_record, next_record = await asyncio.gather(
            self._fetch_season(series_id, season - 1) if has_prev else _none(),
            self._fetch_season(series_id, season + 1) if has_next else _none(),
        )

        return SeriesDetail(
            total_seasons=total,
            current_season=current.detail(),
            prev_season=prev_record.detail() if prev_record is not None else None,
            next_season=next_record.detail() if next_record is not None else None,
        )

    async def _fetch_season(self, series_id: str, season: int) -> SeasonRecord:
        key = season_cache_key(series_id, season)
        cached = self._seasons.get(key)
        if cached is not None:
            log.debug("season_cache_hit", key=key)
            return cached

        log.debug("season_cache_miss", key=key)
        params = {"apikey": self._settings.api_key, "i": series_id, "Season": str(season)}
        response = await self._fetcher.get(
            self._settings.api_url, params=params, headers=_JSON_HEADERS
        )
        data = _json_object(response, key=key)
        record = SeasonRecord(
            season=season,
            episodes=parse_episodes(data.get("Episodes")),
            total_seasons=parse_total_seasons(data.get("totalSeasons")),
        )
        self._seasons.set(key, record)
        return record


async def _none() -> None:
    return None
