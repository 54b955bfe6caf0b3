"""Fixed-window rate limiter on top of the fingerprint cache.

Counts hits with ``increment`` and starts the window with ``expire`` on the
first hit.  When the cache is unavailable the limiter fails open: the
resilient cache reports a count of ``0`` and the hit is allowed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from impact_screening.infrastructure.cache import FingerprintCache, resilient
from impact_screening.infrastructure.fingerprint import CacheKeys

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    count: int
    limit: int

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.count)


class RateLimiter:
    """Allow at most *limit* hits per *window_seconds* for each identifier."""

    def __init__(
        self,
        cache: FingerprintCache | None,
        limit: int = 100,
        window_seconds: int = 900,
    ) -> None:
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")
        if window_seconds < 1:
            raise ValueError(f"window_seconds must be >= 1, got {window_seconds}")
        self._cache = resilient(cache)
        self._limit = limit
        self._window = window_seconds

    async def hit(self, identifier: str) -> RateLimitDecision:
        key = CacheKeys.rate_limit(identifier)
        count = await self._cache.increment(key)
        if count == 1:
            await self._cache.expire(key, self._window)
        if count == 0:
            logger.warning("Rate limiter degraded for %s; allowing request", identifier)
        allowed = count <= self._limit
        if not allowed:
            logger.info("Rate limit exceeded for %s (%d/%d)", identifier, count, self._limit)
        return RateLimitDecision(allowed=allowed, count=count, limit=self._limit)
