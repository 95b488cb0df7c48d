from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class EpisodeInfo(BaseModel):
    episode: int
    title: str | None = None  # None when upstream reports "N/A"


class SeasonDetail(BaseModel):
    """One season's episode list, as handed to views."""

    season: int
    episodes: list[EpisodeInfo] = []


class SeasonRecord(SeasonDetail):
    """Parsed season response. This is what the season cache stores."""

    total_seasons: int = 0

    def detail(self) -> SeasonDetail:
        # Copies, so callers cannot edit the cached record.
        return SeasonDetail(
            season=self.season,
            episodes=[episode.model_copy() for episode in self.episodes],
        )


class SeriesDetail(BaseModel):
    """Current season plus its neighbours for prev/next navigation.

    ``prev_season`` is set iff the requested season is > 1 and
    ``next_season`` iff it is < ``total_seasons``.
    """

    total_seasons: int
    current_season: SeasonDetail
    prev_season: SeasonDetail | None = None
    next_season: SeasonDetail | None = None


class MediaItem(BaseModel):
    """Single entry from a "latest" embed feed.

    Feeds carry more fields than we use (tmdb_id, embed_url, quality...);
    they are kept so views can render them.
    """

    model_config = ConfigDict(extra="allow")

    imdb_id: str = ""
    title: str = ""
    poster: str | None = None


class LatestContent(BaseModel):
    """Home-page aggregate held in the latest-content cache."""

    movies: list[MediaItem] = []
    series: list[MediaItem] = []
