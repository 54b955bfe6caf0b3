"""Tests for the fixed-window rate limiter."""

from __future__ import annotations

import pytest

from impact_screening.infrastructure.rate_limit import RateLimiter
from impact_screening.testing import FailingCache


class TestRateLimiter:

    @pytest.mark.asyncio
    async def test_allows_limit_then_denies(self, memory_cache) -> None:
        limiter = RateLimiter(memory_cache, limit=3, window_seconds=60)
        decisions = [await limiter.hit("user-1") for _ in range(4)]

        assert [d.allowed for d in decisions] == [True, True, True, False]
        assert decisions[2].remaining == 0
        assert decisions[0].remaining == 2

    @pytest.mark.asyncio
    async def test_window_resets(self, memory_cache, clock) -> None:
        limiter = RateLimiter(memory_cache, limit=1, window_seconds=60)
        assert (await limiter.hit("u")).allowed
        assert not (await limiter.hit("u")).allowed
        clock.advance(60)
        assert (await limiter.hit("u")).allowed

    @pytest.mark.asyncio
    async def test_identifiers_are_independent(self, memory_cache) -> None:
        limiter = RateLimiter(memory_cache, limit=1)
        assert (await limiter.hit("a")).allowed
        assert (await limiter.hit("b")).allowed

    @pytest.mark.asyncio
    async def test_fails_open_when_cache_down(self) -> None:
        limiter = RateLimiter(FailingCache(), limit=1)
        for _ in range(3):
            decision = await limiter.hit("u")
            assert decision.allowed
            assert decision.count == 0

    def test_invalid_limit(self) -> None:
        with pytest.raises(ValueError):
            RateLimiter(None, limit=0)
