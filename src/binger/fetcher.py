"""Outbound HTTP with bounded timeouts and retry on transient network failures.

All upstream I/O (OMDb lookups, embed feeds, poster probes, health checks)
goes through a single Fetcher instance. The Fetcher receives an
httpx.AsyncClient via constructor injection; the lifespan owns the client
lifecycle.

Retry bookkeeping lives in local variables of ``with_retry``; nothing is
attached to the client or the request, so concurrent calls never share state.
"""

from __future__ import annotations

import asyncio
import errno
import random
import socket
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, TypeVar

import httpx
import structlog

if TYPE_CHECKING:
    from binger.config import FetcherSettings

log = structlog.get_logger()

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]

DEFAULT_MAX_RETRIES = 2
DEFAULT_BACKOFF_BASE_SECONDS = 0.3
DEFAULT_BACKOFF_JITTER_SECONDS = 0.1

TRANSIENT_ERRNOS: frozenset[int] = frozenset(
    {errno.ECONNRESET, errno.ECONNABORTED, errno.ETIMEDOUT, errno.EPIPE}
)
TRANSIENT_GAI_ERRORS: frozenset[int] = frozenset({socket.EAI_AGAIN, socket.EAI_NONAME})
TRANSIENT_MESSAGES: tuple[str, ...] = (
    "socket hang up",
    "Network Error",
    "Server disconnected",
    "Connection reset by peer",
    "Broken pipe",
    "Temporary failure in name resolution",
    "Name or service not known",
)


def build_http_client(settings: FetcherSettings) -> httpx.AsyncClient:
    """Create the shared httpx client. Called once at startup.

    Keep-alive is off so a retried request always gets a fresh socket.
    """
    return httpx.AsyncClient(
        follow_redirects=True,
        max_redirects=settings.max_redirects,
        timeout=httpx.Timeout(settings.timeout_seconds),
        headers={"User-Agent": settings.user_agent, "Connection": "close"},
        limits=httpx.Limits(
            max_connections=settings.max_connections,
            max_keepalive_connections=0,
        ),
    )


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def is_transient_error(exc: BaseException) -> bool:
    """Return True for network failures worth retrying.

    Timeouts, connection resets/aborts, broken pipes and temporary DNS
    failures qualify. HTTP status errors never do.
    """
    if isinstance(exc, httpx.TimeoutException):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return False

    for err in _exception_chain(exc):
        if isinstance(err, socket.gaierror):
            if err.errno in TRANSIENT_GAI_ERRORS:
                return True
        elif isinstance(err, OSError) and err.errno in TRANSIENT_ERRNOS:
            return True
        message = str(err)
        if any(phrase in message for phrase in TRANSIENT_MESSAGES):
            return True
    return False


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to retry, which errors qualify, and how long to wait."""

    max_retries: int = DEFAULT_MAX_RETRIES
    base_delay: float = DEFAULT_BACKOFF_BASE_SECONDS
    max_jitter: float = DEFAULT_BACKOFF_JITTER_SECONDS
    is_retryable: Callable[[BaseException], bool] = is_transient_error

    @classmethod
    def from_settings(cls, settings: FetcherSettings) -> RetryPolicy:
        return cls(
            max_retries=settings.max_retries,
            base_delay=settings.backoff_base_seconds,
            max_jitter=settings.backoff_jitter_seconds,
        )

    def backoff(self, attempt: int) -> float:
        """Delay in seconds before retry ``attempt`` (1-based)."""
        return self.base_delay * 2 ** (attempt - 1) + random.uniform(0, self.max_jitter)


async def with_retry(
    policy: RetryPolicy,
    fn: Callable[[], Awaitable[T]],
    *,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Await ``fn()``, re-invoking it after a backoff while failures are retryable.

    Once retries are exhausted (or on the first non-retryable failure) the
    last exception propagates unchanged.
    """
    attempt = 0
    while True:
        try:
            return await fn()
        except Exception as exc:
            if attempt >= policy.max_retries or not policy.is_retryable(exc):
                raise
            attempt += 1
            delay = policy.backoff(attempt)
            log.info(
                "upstream_retry_scheduled",
                attempt=attempt,
                max_retries=policy.max_retries,
                delay_seconds=round(delay, 3),
                error=str(exc) or type(exc).__name__,
            )
            await sleep(delay)


class Fetcher:
    """Retrying wrapper around the shared httpx client."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        policy: RetryPolicy | None = None,
        *,
        sleep: Sleep = asyncio.sleep,
        timeout: float | None = None,
    ) -> None:
        self._client = client
        self._policy = policy or RetryPolicy()
        self._sleep = sleep
        self._timeout = timeout

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    @property
    def timeout(self) -> float | None:
        return self._timeout

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        follow_redirects: bool | None = None,
        raise_for_status: bool = True,
        max_retries: int | None = None,
    ) -> httpx.Response:
        """Send a request, retrying transient network failures.

        With ``raise_for_status`` (the default) non-2xx responses raise
        ``httpx.HTTPStatusError``; pass False to get every response back.
        ``follow_redirects=False`` disables redirects for this call only.

        Each attempt, body included, is cut off after ``timeout`` seconds
        with ``httpx.TimeoutException``, which is retried like any timeout.
        """
        policy = self._policy
        if max_retries is not None:
            policy = replace(policy, max_retries=max_retries)

        kwargs: dict[str, Any] = {"params": params, "headers": headers}
        if follow_redirects is not None:
            kwargs["follow_redirects"] = follow_redirects

        async def send() -> httpx.Response:
            try:
                async with asyncio.timeout(self._timeout):
                    response = await self._client.request(method, url, **kwargs)
            except TimeoutError as exc:
                raise httpx.TimeoutException(
                    f"Request exceeded {self._timeout}s: {method} {url}"
                ) from exc
            if raise_for_status:
                response.raise_for_status()
            return response

        return await with_retry(policy, send, sleep=self._sleep)

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def head(self, url: str, **kwargs: Any) -> httpx.Response:
        """Existence probe: no body is transferred."""
        return await self.request("HEAD", url, **kwargs)
