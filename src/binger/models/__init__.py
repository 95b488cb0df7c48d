from __future__ import annotations

from binger.models.cache import CacheEntry
from binger.models.health import DomainHealthResult, DomainHealthStatus
from binger.models.media import (
    EpisodeInfo,
    LatestContent,
    MediaItem,
    SeasonDetail,
    SeasonRecord,
    SeriesDetail,
)

__all__ = [
    # cache
    "CacheEntry",
    # media
    "EpisodeInfo",
    "SeasonDetail",
    "SeasonRecord",
    "SeriesDetail",
    "MediaItem",
    "LatestContent",
    # health
    "DomainHealthResult",
    "DomainHealthStatus",
]
