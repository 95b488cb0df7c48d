from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

DomainHealthStatus = Literal["success", "error"]


class DomainHealthResult(BaseModel):
    """Reachability of one configured domain."""

    name: str  # Config key, e.g. "VIDSRC_DOMAIN"
    domain: str | None = None
    status: DomainHealthStatus
    http_status: int | None = None
    message: str | None = None
