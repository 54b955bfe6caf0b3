"""Tests for fingerprint cache backends, the resilient wrapper and cache keys."""

from __future__ import annotations

import json

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from impact_screening.domain.exceptions import CacheUnavailable
from impact_screening.infrastructure.cache import (
    InMemoryFingerprintCache,
    RedisFingerprintCache,
    ResilientCache,
    resilient,
)
from impact_screening.infrastructure.fingerprint import CacheKeys, CacheTTL, hash_string
from impact_screening.testing import FailingCache


class TestInMemoryFingerprintCache:

    @pytest.mark.asyncio
    async def test_set_and_get(self, memory_cache: InMemoryFingerprintCache) -> None:
        await memory_cache.set("k", {"a": [1, 2]})
        assert await memory_cache.get("k") == {"a": [1, 2]}
        assert await memory_cache.exists("k")

    @pytest.mark.asyncio
    async def test_miss_returns_none(self, memory_cache: InMemoryFingerprintCache) -> None:
        assert await memory_cache.get("missing") is None
        assert not await memory_cache.exists("missing")

    @pytest.mark.asyncio
    async def test_entry_expires_after_ttl(self, memory_cache, clock) -> None:
        await memory_cache.set("k", "v", ttl_seconds=CacheTTL.SHORT)
        clock.advance(CacheTTL.SHORT - 1)
        assert await memory_cache.get("k") == "v"
        clock.advance(1)
        assert await memory_cache.get("k") is None
        assert len(memory_cache) == 0

    @pytest.mark.asyncio
    async def test_writes_sweep_expired_entries(self, memory_cache, clock) -> None:
        for i in range(1000):
            await memory_cache.set(f"k{i}", i, ttl_seconds=10)
        await memory_cache.set("pinned", "v")
        clock.advance(100)
        await memory_cache.set("fresh", "v", ttl_seconds=10)

        assert set(memory_cache._entries) == {"pinned", "fresh"}
        assert len(memory_cache) == 2
        clock.advance(10)
        await memory_cache.set("later", "v")
        assert set(memory_cache._entries) == {"pinned", "later"}

    @pytest.mark.asyncio
    async def test_no_ttl_never_expires(self, memory_cache, clock) -> None:
        await memory_cache.set("k", "v")
        clock.advance(10**9)
        assert await memory_cache.get("k") == "v"

    @pytest.mark.asyncio
    async def test_values_are_copied(self, memory_cache: InMemoryFingerprintCache) -> None:
        value = {"items": [1]}
        await memory_cache.set("k", value)
        value["items"].append(2)
        fetched = await memory_cache.get("k")
        fetched["items"].append(3)
        assert await memory_cache.get("k") == {"items": [1]}

    @pytest.mark.asyncio
    async def test_overwrite_replaces_value(self, memory_cache) -> None:
        await memory_cache.set("k", 1)
        await memory_cache.set("k", 2)
        assert await memory_cache.get("k") == 2

    @pytest.mark.asyncio
    async def test_increment_keeps_expiry(self, memory_cache, clock) -> None:
        assert await memory_cache.increment("c") == 1
        assert await memory_cache.expire("c", 10)
        assert await memory_cache.increment("c", 2) == 3
        clock.advance(10)
        assert await memory_cache.get("c") is None
        assert await memory_cache.increment("c") == 1

    @pytest.mark.asyncio
    async def test_expire_missing_key(self, memory_cache) -> None:
        assert await memory_cache.expire("nope", 5) is False

    @pytest.mark.asyncio
    async def test_health(self, memory_cache) -> None:
        assert await memory_cache.health() is True


class _FakeRedis:
    """Tiny async stand-in for ``redis.asyncio.Redis``."""

    def __init__(self, fail: bool = False) -> None:
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.fail = fail
        self.closed = False

    def _check(self) -> None:
        if self.fail:
            raise RedisConnectionError("connection refused")

    async def get(self, key: str) -> str | None:
        self._check()
        return self.store.get(key)

    async def set(self, key: str, value: str) -> bool:
        self._check()
        self.store[key] = value
        return True

    async def setex(self, key: str, ttl: int, value: str) -> bool:
        self._check()
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    async def incrby(self, key: str, amount: int) -> int:
        self._check()
        value = int(self.store.get(key, "0")) + amount
        self.store[key] = str(value)
        return value

    async def expire(self, key: str, ttl: int) -> bool:
        self._check()
        if key not in self.store:
            return False
        self.ttls[key] = ttl
        return True

    async def exists(self, key: str) -> int:
        self._check()
        return int(key in self.store)

    async def ping(self) -> bool:
        self._check()
        return True

    async def aclose(self) -> None:
        self.closed = True


class TestRedisFingerprintCache:

    @pytest.mark.asyncio
    async def test_values_are_json_under_prefix(self) -> None:
        client = _FakeRedis()
        cache = RedisFingerprintCache(client=client, key_prefix="impact:")
        await cache.set("ai:screening:abc", {"overallScore": 80}, ttl_seconds=3600)

        assert json.loads(client.store["impact:ai:screening:abc"]) == {"overallScore": 80}
        assert client.ttls["impact:ai:screening:abc"] == 3600
        assert await cache.get("ai:screening:abc") == {"overallScore": 80}

    @pytest.mark.asyncio
    async def test_set_without_ttl(self) -> None:
        client = _FakeRedis()
        cache = RedisFingerprintCache(client=client)
        await cache.set("k", [1])
        assert "impact:k" not in client.ttls

    @pytest.mark.asyncio
    async def test_counter_operations(self) -> None:
        client = _FakeRedis()
        cache = RedisFingerprintCache(client=client)
        assert await cache.increment("rate_limit:u") == 1
        assert await cache.expire("rate_limit:u", 900)
        assert await cache.exists("rate_limit:u")
        assert await cache.health()

    @pytest.mark.asyncio
    async def test_errors_become_cache_unavailable(self) -> None:
        cache = RedisFingerprintCache(client=_FakeRedis(fail=True))
        with pytest.raises(CacheUnavailable) as exc_info:
            await cache.get("k")
        assert exc_info.value.operation == "get"
        assert exc_info.value.key == "k"

    @pytest.mark.asyncio
    async def test_aclose(self) -> None:
        client = _FakeRedis()
        await RedisFingerprintCache(client=client).aclose()
        assert client.closed


class TestResilientCache:

    @pytest.mark.asyncio
    async def test_absorbs_every_failure(self) -> None:
        backend = FailingCache()
        cache = ResilientCache(backend)

        assert await cache.get("k") is None
        await cache.set("k", 1, 60)
        assert await cache.increment("k") == 0
        assert await cache.expire("k", 60) is False
        assert await cache.exists("k") is False
        assert await cache.health() is False
        assert backend.calls == 6

    @pytest.mark.asyncio
    async def test_passes_through_healthy_backend(self, memory_cache) -> None:
        cache = ResilientCache(memory_cache)
        await cache.set("k", "v")
        assert await cache.get("k") == "v"
        assert cache.backend is memory_cache

    @pytest.mark.asyncio
    async def test_redis_outage_degrades_to_miss(self) -> None:
        cache = resilient(RedisFingerprintCache(client=_FakeRedis(fail=True)))
        await cache.set("k", 1)
        assert await cache.get("k") is None

    def test_resilient_is_idempotent(self) -> None:
        wrapped = resilient(None)
        assert isinstance(wrapped.backend, InMemoryFingerprintCache)
        assert resilient(wrapped) is wrapped


class TestCacheKeys:

    def test_ai_screening(self) -> None:
        assert CacheKeys.ai_screening("abc") == "ai:screening:abc"

    def test_document_analysis(self) -> None:
        url = "https://files.example/cert.pdf"
        assert CacheKeys.document_analysis("certificate", url) == (
            f"doc_analysis:certificate:{hash_string(url)}"
        )

    def test_translation_defaults_to_auto(self) -> None:
        key = CacheKeys.translation(None, "fr", "hello")
        assert key == f"translation:auto:fr:{hash_string('hello')}"

    def test_rate_limit(self) -> None:
        assert CacheKeys.rate_limit("user-1") == "rate_limit:user-1"

    def test_ttl_presets(self) -> None:
        assert (CacheTTL.SHORT, CacheTTL.MEDIUM, CacheTTL.LONG, CacheTTL.VERY_LONG) == (
            300,
            1800,
            3600,
            86400,
        )

    def test_hash_string_is_md5(self) -> None:
        assert hash_string("") == "d41d8cd98f00b204e9800998ecf8427e"
