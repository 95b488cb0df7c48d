"""Unit tests for binger.posters.PosterResolver."""

from __future__ import annotations

from typing import Any

import httpx
import pytest
import respx

from binger.models.media import MediaItem
from binger.posters import PosterResolver

PLACEHOLDER = "http://app.test/images/no-binger.jpg"


class StubMetadata:
    """In-memory metadata source keyed by IMDb ID."""

    def __init__(self, records: dict[str, dict[str, Any]]) -> None:
        self.records = records
        self.lookups: list[tuple[str, bool]] = []

    async def fetch_metadata(
        self, query: str, search: bool = True, media_type: str = ""
    ) -> dict[str, Any]:
        self.lookups.append((query, search))
        return self.records.get(query, {})

    async def fetch_season_detail(self, series_id: str, season: int):
        raise NotImplementedError


def _record(poster: object) -> dict[str, Any]:
    return {"Response": "True", "Poster": poster}


@pytest.fixture()
def metadata() -> StubMetadata:
    return StubMetadata(
        {
            "tt1": _record("https://img.test/one.jpg"),
            "tt2": _record("https://img.test/two.jpg"),
            "tt3": _record("https://img.test/three.jpg"),
            "tt_na": _record("N/A"),
            "tt_false": {"Response": "False", "Error": "Incorrect IMDb ID."},
        }
    )


@pytest.fixture()
def resolver(metadata: StubMetadata, fetcher) -> PosterResolver:
    return PosterResolver(metadata, fetcher, PLACEHOLDER)


class TestResolvePoster:
    async def test_reachable_poster(self, resolver: PosterResolver, metadata) -> None:
        with respx.mock:
            route = respx.head("https://img.test/one.jpg").mock(return_value=httpx.Response(200))
            assert await resolver.resolve_poster("tt1") == "https://img.test/one.jpg"
        assert route.call_count == 1
        assert metadata.lookups == [("tt1", False)]

    async def test_unsuccessful_lookup_uses_placeholder(self, resolver: PosterResolver) -> None:
        assert await resolver.resolve_poster("tt_false") == PLACEHOLDER

    async def test_unknown_id_uses_placeholder(self, resolver: PosterResolver) -> None:
        assert await resolver.resolve_poster("tt_missing") == PLACEHOLDER

    async def test_na_poster_uses_placeholder(self, resolver: PosterResolver) -> None:
        assert await resolver.resolve_poster("tt_na") == PLACEHOLDER

    async def test_missing_poster_field(self, metadata, fetcher) -> None:
        metadata.records["tt_bare"] = {"Response": "True"}
        resolver = PosterResolver(metadata, fetcher, PLACEHOLDER)
        assert await resolver.resolve_poster("tt_bare") == PLACEHOLDER

    @pytest.mark.parametrize("poster", [12345, 1.5, ["https://img.test/one.jpg"], True])
    async def test_non_string_poster_uses_placeholder(self, metadata, fetcher, poster) -> None:
        metadata.records["tt_odd"] = _record(poster)
        resolver = PosterResolver(metadata, fetcher, PLACEHOLDER)
        with respx.mock(assert_all_called=False) as router:
            route = router.head(host="img.test").mock(return_value=httpx.Response(200))
            assert await resolver.resolve_poster("tt_odd") == PLACEHOLDER
        assert route.call_count == 0

    async def test_head_error_status_uses_placeholder(self, resolver: PosterResolver) -> None:
        with respx.mock:
            respx.head("https://img.test/one.jpg").mock(return_value=httpx.Response(404))
            assert await resolver.resolve_poster("tt1") == PLACEHOLDER

    async def test_head_network_failure_uses_placeholder(
        self, resolver: PosterResolver
    ) -> None:
        with respx.mock:
            respx.head("https://img.test/one.jpg").mock(
                side_effect=httpx.ConnectError("Connection refused")
            )
            assert await resolver.resolve_poster("tt1") == PLACEHOLDER

    async def test_placeholder_property(self, resolver: PosterResolver) -> None:
        assert resolver.placeholder == PLACEHOLDER


class TestFetchAndResolvePosters:
    async def test_posters_assigned_in_order(self, resolver: PosterResolver) -> None:
        items = [
            MediaItem(imdb_id="tt3", title="Three"),
            MediaItem(imdb_id="tt_na", title="No poster"),
            MediaItem(imdb_id="tt1", title="One"),
            MediaItem(imdb_id="tt2", title="Two"),
        ]
        with respx.mock:
            respx.head("https://img.test/one.jpg").mock(return_value=httpx.Response(200))
            respx.head("https://img.test/two.jpg").mock(return_value=httpx.Response(500))
            respx.head("https://img.test/three.jpg").mock(return_value=httpx.Response(200))
            await resolver.fetch_and_resolve_posters(items)

        assert [item.poster for item in items] == [
            "https://img.test/three.jpg",
            PLACEHOLDER,
            "https://img.test/one.jpg",
            PLACEHOLDER,
        ]

    async def test_empty_list(self, resolver: PosterResolver, metadata) -> None:
        await resolver.fetch_and_resolve_posters([])
        assert metadata.lookups == []

    async def test_metadata_failure_propagates(self, fetcher) -> None:
        class FailingMetadata(StubMetadata):
            async def fetch_metadata(self, query, search=True, media_type=""):
                raise httpx.ConnectError("Connection refused")

        resolver = PosterResolver(FailingMetadata({}), fetcher, PLACEHOLDER)
        with pytest.raises(httpx.ConnectError):
            await resolver.fetch_and_resolve_posters([MediaItem(imdb_id="tt1")])
