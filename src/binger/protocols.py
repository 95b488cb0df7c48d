"""Protocol interfaces for swappable components.

Handlers, the poster resolver and AppState reference these protocols, not
the concrete implementations. This allows:
- Tests to use lightweight in-memory implementations
- A different metadata provider to be swapped in without changing handlers
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    import httpx

    from binger.models.media import SeriesDetail


class FetcherProtocol(Protocol):
    """Interface for the retrying HTTP client."""

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response: ...

    async def get(self, url: str, **kwargs: Any) -> httpx.Response: ...

    async def head(self, url: str, **kwargs: Any) -> httpx.Response: ...


class MetadataProtocol(Protocol):
    """Interface for the cached metadata lookups."""

    async def fetch_metadata(
        self, query: str, search: bool = True, media_type: str = ""
    ) -> dict[str, Any]: ...

    async def fetch_season_detail(self, series_id: str, season: int) -> SeriesDetail: ...
