"""Normalisation of upstream OMDb and embed-feed payloads.

OMDb reports missing fields with the literal string ``"N/A"`` and encodes
numbers as strings. Everything read from upstream passes through here so
that sentinels become ``None`` and malformed shapes degrade to empty
defaults instead of raising.
"""

from __future__ import annotations

from typing import Any

import structlog
from pydantic import ValidationError

from binger.models.media import EpisodeInfo, MediaItem

log = structlog.get_logger()

NA_SENTINEL = "N/A"


def normalize_upstream_field(value: Any) -> Any:
    """Map upstream "value absent" markers (``None``, ``""``, ``"N/A"``) to None."""
    if value is None:
        return None
    if isinstance(value, str) and value.strip() in ("", NA_SENTINEL):
        return None
    return value


def _to_int(value: Any) -> int | None:
    value = normalize_upstream_field(value)
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_total_seasons(raw: Any) -> int:
    """``"5"`` → 5. Missing or non-numeric values count as zero seasons."""
    total = _to_int(raw)
    return total if total is not None and total > 0 else 0


def parse_episodes(raw: Any) -> list[EpisodeInfo]:
    """Parse an OMDb ``Episodes`` array.

    A non-list degrades to ``[]``; entries without a numeric ``Episode``
    are skipped.
    """
    if not isinstance(raw, list):
        return []

    episodes: list[EpisodeInfo] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        number = _to_int(item.get("Episode"))
        if number is None:
            continue
        title = normalize_upstream_field(item.get("Title"))
        if title is not None:
            title = str(title)
        episodes.append(EpisodeInfo(episode=number, title=title))
    return episodes


def parse_feed_items(raw: Any) -> list[MediaItem]:
    """Parse the ``result`` array of a "latest" embed feed."""
    if not isinstance(raw, list):
        return []

    items: list[MediaItem] = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        try:
            items.append(MediaItem.model_validate(entry))
        except ValidationError:
            log.debug("feed_item_skipped", entry=entry)
    return items
