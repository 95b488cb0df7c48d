"""Handlers for the home-page aggregate and its operator escape hatch.

No Starlette imports; server.py handles the HTTP wiring.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from binger.latest import load_latest_content

if TYPE_CHECKING:
    from binger.state import AppState


async def handle(state: AppState) -> dict:
    """Return the latest movies and series, served from cache when possible."""
    log = structlog.get_logger().bind(handler="home")
    log.info("handler_called")

    snapshot = await load_latest_content(state)
    return snapshot.model_dump(mode="json")


def handle_clear(state: AppState) -> dict:
    """Invalidate the latest-content snapshot so the next home view refetches."""
    state.latest.invalidate()
    return {"cleared": True}
