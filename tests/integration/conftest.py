"""Integration test fixtures.

Provides the Starlette app wired to the shared ``app_state`` fixture (virtual
clock, recorded backoff sleeps) and an httpx client talking to it in-process.
Upstream traffic still goes through the state's own httpx client, so respx
routes mock OMDb and the embed hosts while the ASGI transport stays real.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

from binger.server import create_app

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from starlette.applications import Starlette

    from binger.state import AppState


@pytest.fixture()
def app(app_state: AppState) -> Starlette:
    return create_app(state=app_state)


@pytest.fixture()
async def api(app: Starlette) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://binger.local",
    ) as client:
        yield client
