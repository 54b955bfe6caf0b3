"""Fingerprint cache backends.

The cache is an optimization, never a dependency: orchestrators always wrap
the backend they are given in :class:`ResilientCache`, which turns any
backend failure into a miss or a no-op.

Classes
-------
FingerprintCache
    Abstract async key/value contract with per-key TTL.
InMemoryFingerprintCache
    Thread-safe dict-backed store with lazy expiry and an injectable clock.
RedisFingerprintCache
    ``redis.asyncio`` backend storing JSON-encoded values.
ResilientCache
    Decorator that logs and absorbs backend errors.
"""

from __future__ import annotations

import copy
import json
import logging
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from impact_screening.domain.exceptions import CacheUnavailable
from impact_screening.domain.values import CacheEntry

logger = logging.getLogger(__name__)


# ===================================================================== #
#  Abstract contract                                                     #
# ===================================================================== #


class FingerprintCache(ABC):
    """Async key/value store with per-key TTL.

    Values are JSON-compatible (dicts, lists, strings, numbers).  A
    ``ttl_seconds`` of ``None`` or ``<= 0`` means the key never expires.
    Implementations must be safe for concurrent use on unrelated keys.
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the live value under *key*, or ``None`` on a miss."""

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """Store *value* under *key*, overwriting any previous value."""

    @abstractmethod
    async def increment(self, key: str, amount: int = 1) -> int:
        """Atomically add *amount* to an integer counter (created at 0)."""

    @abstractmethod
    async def expire(self, key: str, ttl_seconds: int) -> bool:
        """Set a TTL on an existing key.  Returns ``False`` if it is absent."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Return ``True`` if *key* holds a live value."""

    async def health(self) -> bool:
        """Return ``True`` if the backend is reachable."""
        return True

    async def aclose(self) -> None:
        """Release backend resources."""


# ===================================================================== #
#  In-memory backend                                                     #
# ===================================================================== #


class InMemoryFingerprintCache(FingerprintCache):
    """Thread-safe in-process cache.

    Expired entries are dropped when read and swept on every write once
    the earliest known expiry has passed.  Values are deep-copied on the way in
    and out so callers can never mutate a stored value.

    Parameters
    ----------
    clock:
        Zero-argument callable returning the current time in seconds.
        Defaults to ``time.monotonic``; tests inject a fake to move time.
    """

    def __init__(self, clock: Callable[[], float] | None = None) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._clock = clock or time.monotonic
        self._next_expiry: float | None = None

    def _expires_at(self, ttl_seconds: int | None) -> float | None:
        if ttl_seconds is None or ttl_seconds <= 0:
            return None
        return self._clock() + ttl_seconds

    def _live(self, key: str) -> CacheEntry | None:
        """Return the live entry for *key*; caller must hold the lock."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            return None
        return entry

    def _store(self, entry: CacheEntry) -> None:
        """Insert *entry*, sweeping expired entries first; caller must hold the lock."""
        now = self._clock()
        if self._next_expiry is not None and now >= self._next_expiry:
            self._entries = {
                k: e for k, e in self._entries.items() if not e.is_expired(now)
            }
            pending = [e.expires_at for e in self._entries.values() if e.expires_at is not None]
            self._next_expiry = min(pending, default=None)
        self._entries[entry.key] = entry
        if entry.expires_at is not None and (
            self._next_expiry is None or entry.expires_at < self._next_expiry
        ):
            self._next_expiry = entry.expires_at

    async def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._live(key)
            if entry is None:
                return None
            return copy.deepcopy(entry.value)

    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        entry = CacheEntry(
            key=key,
            value=copy.deepcopy(value),
            expires_at=self._expires_at(ttl_seconds),
        )
        with self._lock:
            self._store(entry)

    async def increment(self, key: str, amount: int = 1) -> int:
        with self._lock:
            entry = self._live(key)
            current = int(entry.value) if entry is not None else 0
            expires_at = entry.expires_at if entry is not None else None
            new_value = current + amount
            self._store(CacheEntry(key=key, value=new_value, expires_at=expires_at))
            return new_value

    async def expire(self, key: str, ttl_seconds: int) -> bool:
        with self._lock:
            entry = self._live(key)
            if entry is None:
                return False
            self._store(
                CacheEntry(
                    key=key,
                    value=entry.value,
                    expires_at=self._expires_at(ttl_seconds),
                )
            )
            return True

    async def exists(self, key: str) -> bool:
        with self._lock:
            return self._live(key) is not None

    def __len__(self) -> int:
        with self._lock:
            now = self._clock()
            return sum(1 for e in self._entries.values() if not e.is_expired(now))


# ===================================================================== #
#  Redis backend                                                         #
# ===================================================================== #


class RedisFingerprintCache(FingerprintCache):
    """Redis-backed cache using ``redis.asyncio``.

    Every key is namespaced with *key_prefix*; values are JSON-encoded.
    Backend errors are raised as :class:`CacheUnavailable`.
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379",
        key_prefix: str = "impact:",
        client: Any = None,
        connect_timeout: float = 10.0,
        command_timeout: float = 5.0,
    ) -> None:
        if client is None:
            client = aioredis.from_url(
                url,
                decode_responses=True,
                socket_connect_timeout=connect_timeout,
                socket_timeout=command_timeout,
            )
        self._client = client
        self._prefix = key_prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str) -> Any | None:
        try:
            raw = await self._client.get(self._key(key))
        except (RedisError, OSError) as exc:
            raise CacheUnavailable(f"get failed: {exc}", operation="get", key=key) from exc
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        serialized = json.dumps(value)
        try:
            if ttl_seconds is not None and ttl_seconds > 0:
                await self._client.setex(self._key(key), ttl_seconds, serialized)
            else:
                await self._client.set(self._key(key), serialized)
        except (RedisError, OSError) as exc:
            raise CacheUnavailable(f"set failed: {exc}", operation="set", key=key) from exc

    async def increment(self, key: str, amount: int = 1) -> int:
        try:
            return int(await self._client.incrby(self._key(key), amount))
        except (RedisError, OSError) as exc:
            raise CacheUnavailable(
                f"increment failed: {exc}", operation="increment", key=key
            ) from exc

    async def expire(self, key: str, ttl_seconds: int) -> bool:
        try:
            return bool(await self._client.expire(self._key(key), ttl_seconds))
        except (RedisError, OSError) as exc:
            raise CacheUnavailable(
                f"expire failed: {exc}", operation="expire", key=key
            ) from exc

    async def exists(self, key: str) -> bool:
        try:
            return int(await self._client.exists(self._key(key))) == 1
        except (RedisError, OSError) as exc:
            raise CacheUnavailable(
                f"exists failed: {exc}", operation="exists", key=key
            ) from exc

    async def health(self) -> bool:
        try:
            return bool(await self._client.ping())
        except (RedisError, OSError) as exc:
            raise CacheUnavailable(f"ping failed: {exc}", operation="health") from exc

    async def aclose(self) -> None:
        await self._client.aclose()

    def __repr__(self) -> str:
        return f"RedisFingerprintCache(prefix={self._prefix!r})"


# ===================================================================== #
#  Resilient decorator                                                   #
# ===================================================================== #


class ResilientCache(FingerprintCache):
    """Wrap a backend so that it degrades to a no-op instead of raising.

    ``get`` becomes a miss, ``set`` a no-op, ``increment`` returns ``0`` and
    the boolean queries return ``False``.  Every absorbed failure is logged.
    """

    def __init__(self, backend: FingerprintCache) -> None:
        self._backend = backend

    @property
    def backend(self) -> FingerprintCache:
        return self._backend

    async def get(self, key: str) -> Any | None:
        try:
            return await self._backend.get(key)
        except Exception as exc:
            logger.warning("Cache get error for key %s: %s", key, exc)
            return None

    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        try:
            await self._backend.set(key, value, ttl_seconds)
        except Exception as exc:
            logger.warning("Cache set error for key %s: %s", key, exc)

    async def increment(self, key: str, amount: int = 1) -> int:
        try:
            return await self._backend.increment(key, amount)
        except Exception as exc:
            logger.warning("Cache increment error for key %s: %s", key, exc)
            return 0

    async def expire(self, key: str, ttl_seconds: int) -> bool:
        try:
            return await self._backend.expire(key, ttl_seconds)
        except Exception as exc:
            logger.warning("Cache expire error for key %s: %s", key, exc)
            return False

    async def exists(self, key: str) -> bool:
        try:
            return await self._backend.exists(key)
        except Exception as exc:
            logger.warning("Cache exists check error for key %s: %s", key, exc)
            return False

    async def health(self) -> bool:
        try:
            return await self._backend.health()
        except Exception as exc:
            logger.error("Cache health check failed: %s", exc)
            return False

    async def aclose(self) -> None:
        await self._backend.aclose()


def resilient(cache: FingerprintCache | None) -> ResilientCache:
    """Return *cache* wrapped in :class:`ResilientCache` (idempotent).

    ``None`` yields a fresh in-memory cache.
    """
    if cache is None:
        cache = InMemoryFingerprintCache()
    if isinstance(cache, ResilientCache):
        return cache
    return ResilientCache(cache)
