"""Reachability checks for the configured embed domains and the app URL."""

from __future__ import annotations

import asyncio
import re
from typing import TYPE_CHECKING

import httpx
import structlog

from binger.models.health import DomainHealthResult

if TYPE_CHECKING:
    from binger.protocols import FetcherProtocol

log = structlog.get_logger()

_SCHEME = re.compile(r"^https?://", re.IGNORECASE)


def normalize_url(domain: str) -> str:
    return domain if _SCHEME.match(domain) else f"https://{domain}"


async def check_domain_health(
    fetcher: FetcherProtocol, name: str, domain: str | None
) -> DomainHealthResult:
    """Probe ``domain`` once. Any status below 400 counts as reachable.

    Redirects are not followed; a redirecting domain counts as up.
    """
    if not domain:
        return DomainHealthResult(name=name, status="error", message="Domain not configured")

    try:
        response = await fetcher.get(
            normalize_url(domain), follow_redirects=False, raise_for_status=False
        )
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        log.info("domain_health_error", name=name, domain=domain, error=str(exc))
        return DomainHealthResult(
            name=name, domain=domain, status="error", message=str(exc) or "Unknown error"
        )

    if 200 <= response.status_code < 400:
        return DomainHealthResult(
            name=name, domain=domain, status="success", http_status=response.status_code
        )
    return DomainHealthResult(
        name=name,
        domain=domain,
        status="error",
        http_status=response.status_code,
        message=f"Received status code {response.status_code}",
    )


async def check_domains(
    fetcher: FetcherProtocol, domains: list[tuple[str, str | None]]
) -> list[DomainHealthResult]:
    """Check several ``(name, domain)`` pairs concurrently, preserving order."""
    return list(
        await asyncio.gather(*(check_domain_health(fetcher, name, d) for name, d in domains))
    )


def is_healthy(results: list[DomainHealthResult]) -> bool:
    return all(result.status == "success" for result in results)
