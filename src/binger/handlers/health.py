"""Handlers for the domain health endpoints.

Each returns ``(http_status, payload)``: 200 when every checked domain is
reachable, 503 otherwise.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from binger.errors import BingerError, ErrorCode
from binger.health import check_domain_health, check_domains, is_healthy

if TYPE_CHECKING:
    from binger.state import AppState

EMBED_TARGETS = frozenset({"vidsrc", "multi"})


async def handle_embed_domains(target: str | None, state: AppState) -> tuple[int, dict]:
    log = structlog.get_logger().bind(handler="health_embed_domains", target=target)
    log.info("handler_called")

    embed = state.settings.embed
    target = target.lower() if target else None

    if target == "multi" and not embed.multi_domain:
        raise BingerError(
            code=ErrorCode.TARGET_NOT_CONFIGURED,
            message="Target not configured",
            suggestion="Set embed.multi_domain to check the secondary embed domain.",
            recoverable=False,
        )
    if target is not None and target not in EMBED_TARGETS:
        raise BingerError(
            code=ErrorCode.INVALID_TARGET,
            message="Invalid target",
            suggestion="Use target=vidsrc, target=multi, or omit it to check every domain.",
            recoverable=False,
        )

    domains: list[tuple[str, str | None]] = []
    if target in (None, "vidsrc"):
        domains.append(("VIDSRC_DOMAIN", embed.vidsrc_domain))
    # The secondary domain is optional; skip it silently when unset.
    if target in (None, "multi") and embed.multi_domain:
        domains.append(("MULTI_DOMAIN", embed.multi_domain))

    results = await check_domains(state.fetcher, domains)
    healthy = is_healthy(results)
    log.info("health_check_complete", healthy=healthy, checked=len(results))

    return (
        200 if healthy else 503,
        {
            "status": "success" if healthy else "error",
            "domains": [r.model_dump(mode="json", exclude_none=True) for r in results],
        },
    )


async def handle_app_url(state: AppState) -> tuple[int, dict]:
    result = await check_domain_health(state.fetcher, "APP_URL", state.settings.app.url)
    healthy = result.status == "success"
    return 200 if healthy else 503, result.model_dump(mode="json", exclude_none=True)
