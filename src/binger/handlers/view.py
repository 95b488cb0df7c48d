"""Handler for the movie / episode view.

Combines the OMDb record, the embed player sources and, for series, the
season navigation detail.
"""

from __future__ import annotations

import asyncio
from dataclasses import asdict
from typing import TYPE_CHECKING

import structlog

from binger.embed import build_canonical, build_sources
from binger.errors import BingerError, ErrorCode

if TYPE_CHECKING:
    from binger.state import AppState

MEDIA_TYPES = frozenset({"movie", "series"})


def _positive_int(name: str, raw: str | None) -> int:
    if raw is None or raw == "":
        return 1
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value < 1:
        raise BingerError(
            code=ErrorCode.INVALID_INPUT,
            message=f"Invalid {name}: {raw!r}",
            suggestion=f"{name.capitalize()} must be a positive whole number.",
            recoverable=False,
        )
    return value


async def handle(
    imdb_id: str,
    media_type: str,
    state: AppState,
    *,
    season: str | None = None,
    episode: str | None = None,
    preferred_server: str | None = None,
) -> dict:
    log = structlog.get_logger().bind(handler="view", imdb_id=imdb_id, type=media_type)
    log.info("handler_called")

    if media_type not in MEDIA_TYPES:
        raise BingerError(
            code=ErrorCode.INVALID_INPUT,
            message=f"Unknown media type: {media_type!r}",
            suggestion="Use 'movie' or 'series'.",
            recoverable=False,
        )

    if media_type == "movie":
        sources = build_sources(
            state.settings.embed, imdb_id, "movie", preferred_server=preferred_server
        )
        data = await state.omdb.fetch_metadata(imdb_id, False)
        return {
            "id": imdb_id,
            "type": media_type,
            "canonical": build_canonical(state.settings.app.url, imdb_id, "movie"),
            "data": data,
            **asdict(sources),
        }

    season_number = _positive_int("season", season)
    episode_number = _positive_int("episode", episode)
    sources = build_sources(
        state.settings.embed,
        imdb_id,
        "series",
        season_number,
        episode_number,
        preferred_server,
    )
    data, series_detail = await asyncio.gather(
        state.omdb.fetch_metadata(imdb_id, False),
        state.omdb.fetch_season_detail(imdb_id, season_number),
    )
    return {
        "id": imdb_id,
        "type": media_type,
        "season": season_number,
        "episode": episode_number,
        "canonical": build_canonical(
            state.settings.app.url, imdb_id, "series", season_number, episode_number
        ),
        "data": data,
        "series_detail": series_detail.model_dump(mode="json", exclude_none=True),
        **asdict(sources),
    }
