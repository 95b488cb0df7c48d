"""Handler for title search."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from binger.errors import BingerError, ErrorCode

if TYPE_CHECKING:
    from binger.state import AppState

DEFAULT_SEARCH_TYPE = "movie"


async def handle(query: str, media_type: str | None, state: AppState) -> dict:
    query = query.strip()
    media_type = media_type or DEFAULT_SEARCH_TYPE

    log = structlog.get_logger().bind(handler="search", query=query, type=media_type)
    log.info("handler_called")

    if not query:
        raise BingerError(
            code=ErrorCode.INVALID_INPUT,
            message="Search query must not be empty.",
            suggestion="Provide a title to search for with the 'q' parameter.",
            recoverable=False,
        )

    data = await state.omdb.fetch_metadata(query, True, media_type)
    results = data.get("Search") or []
    log.info("search_complete", result_count=len(results))

    return {"query": query, "type": media_type, "results": results}
