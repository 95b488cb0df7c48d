"""Poster resolution for feed items.

OMDb sometimes advertises poster URLs that no longer resolve. A poster is
only trusted after a HEAD probe succeeds; otherwise the configured
placeholder image is used, so views never render a broken image.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import httpx
import structlog

from binger.parser import normalize_upstream_field

if TYPE_CHECKING:
    from binger.models.media import MediaItem
    from binger.protocols import FetcherProtocol, MetadataProtocol

log = structlog.get_logger()


class PosterResolver:
    def __init__(
        self,
        metadata: MetadataProtocol,
        fetcher: FetcherProtocol,
        placeholder: str,
    ) -> None:
        self._metadata = metadata
        self._fetcher = fetcher
        self._placeholder = placeholder

    @property
    def placeholder(self) -> str:
        return self._placeholder

    async def resolve_poster(self, imdb_id: str) -> str:
        """Return a reachable poster URL for ``imdb_id``, or the placeholder."""
        data = await self._metadata.fetch_metadata(imdb_id, search=False)
        if data.get("Response") != "True":
            return self._placeholder

        poster = normalize_upstream_field(data.get("Poster"))
        if not isinstance(poster, str) or not poster:
            return self._placeholder

        try:
            await self._fetcher.head(poster)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            log.info("poster_probe_failed", imdb_id=imdb_id, url=poster, error=str(exc))
            return self._placeholder
        return poster

    async def fetch_and_resolve_posters(self, items: list[MediaItem]) -> None:
        """Set ``.poster`` on every item. Lookups run concurrently; order is kept."""
        posters = await asyncio.gather(*(self.resolve_poster(item.imdb_id) for item in items))
        for item, poster in zip(items, posters, strict=True):
            item.poster = poster
