"""Shared test fixtures for the binger test suite."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock

import httpx
import pytest

from binger.config import Settings
from binger.fetcher import Fetcher, RetryPolicy
from binger.omdb import OmdbClient
from binger.state import AppState, build_state

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

OMDB_URL = "http://omdb.test"
OMDB_HOST = "omdb.test"
VIDSRC_DOMAIN = "vidsrc.test"
APP_URL = "http://app.test"
PLACEHOLDER = f"{APP_URL}/images/no-binger.jpg"


class FakeClock:
    """Virtual monotonic clock. Tests move time forward with ``advance``."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_settings(**sections: dict) -> Settings:
    """Test settings pointing every upstream at a respx-mockable host."""
    base: dict[str, dict] = {
        "omdb": {"api_key": "key", "api_url": OMDB_URL},
        "embed": {"vidsrc_domain": VIDSRC_DOMAIN},
        "app": {"url": APP_URL},
        "server": {"admin_key": "secret"},
    }
    for name, values in sections.items():
        base[name] = {**base.get(name, {}), **values}
    return Settings(**base)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def sleep() -> AsyncMock:
    """Stand-in for asyncio.sleep so backoff delays are recorded, not waited."""
    return AsyncMock()


@pytest.fixture()
def settings_factory() -> Callable[..., Settings]:
    return make_settings


@pytest.fixture()
def settings() -> Settings:
    return make_settings()


@pytest.fixture()
async def http_client() -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient() as client:
        yield client


@pytest.fixture()
def fetcher(http_client: httpx.AsyncClient, sleep: AsyncMock) -> Fetcher:
    return Fetcher(http_client, RetryPolicy(), sleep=sleep)


@pytest.fixture()
def omdb(fetcher: Fetcher, settings: Settings, clock: FakeClock) -> OmdbClient:
    return OmdbClient(fetcher, settings.omdb, clock=clock)


@pytest.fixture()
def app_state(
    settings: Settings,
    http_client: httpx.AsyncClient,
    clock: FakeClock,
    sleep: AsyncMock,
) -> AppState:
    return build_state(settings, http_client, clock=clock, sleep=sleep)
