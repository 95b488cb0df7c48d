"""Embed player source URLs.

Server 1 is the primary vidsrc domain. Server 2 is the optional secondary
domain and, when configured, is the default. A viewer's ``preferredServer``
cookie overrides the default as long as the preferred server exists.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal
from urllib.parse import urlencode

if TYPE_CHECKING:
    from binger.config import EmbedSettings

PREFERRED_SERVER_COOKIE = "preferredServer"

ServerId = Literal["1", "2"]


@dataclass(frozen=True)
class EmbedSources:
    server1_src: str
    server2_src: str | None
    iframe_src: str
    current_server: ServerId


def normalize_preferred_server(value: str | None) -> ServerId | None:
    """Accept only ``"1"`` or ``"2"`` from the cookie; anything else is ignored."""
    if value is None:
        return None
    value = value.strip()
    if value == "1":
        return "1"
    if value == "2":
        return "2"
    return None


def build_sources(
    settings: EmbedSettings,
    imdb_id: str,
    media_type: str,
    season: int | str | None = None,
    episode: int | str | None = None,
    preferred_server: str | None = None,
) -> EmbedSources:
    is_series = media_type == "series"

    if is_series:
        query = urlencode({"imdb": imdb_id, "season": season, "episode": episode})
        server1 = f"https://{settings.vidsrc_domain}/embed/tv?{query}"
    else:
        server1 = f"https://{settings.vidsrc_domain}/embed/movie?{urlencode({'imdb': imdb_id})}"

    server2: str | None = None
    if settings.multi_domain:
        params: dict[str, object] = {"video_id": imdb_id}
        if is_series:
            params.update(s=season, e=episode)
        server2 = f"https://{settings.multi_domain}/?{urlencode(params)}"

    current: ServerId = "2" if server2 else "1"
    preferred = normalize_preferred_server(preferred_server)
    if preferred == "1" or (preferred == "2" and server2):
        current = preferred

    return EmbedSources(
        server1_src=server1,
        server2_src=server2,
        iframe_src=server2 if current == "2" and server2 else server1,
        current_server=current,
    )


def build_canonical(
    app_url: str,
    imdb_id: str,
    media_type: str,
    season: int | str | None = None,
    episode: int | str | None = None,
) -> str:
    """Canonical page URL for a view; series URLs carry season and episode."""
    url = f"{app_url.rstrip('/')}/view/{imdb_id}/{media_type}"
    if media_type == "series":
        url += f"/{season}/{episode}"
    return url
