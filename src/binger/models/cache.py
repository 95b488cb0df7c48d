from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached value and the clock reading after which it is no longer served."""

    value: T
    expires_at: float  # Same time base as the owning cache's clock

    def is_fresh(self, now: float) -> bool:
        return self.expires_at > now
