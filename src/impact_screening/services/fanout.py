"""Concurrent fan-out of independent adapter calls.

Two joining policies are offered:

* :meth:`FanOut.all` -- fail-fast.  Every call must succeed; the first
  failure cancels the siblings and is raised.
* :meth:`FanOut.settle` -- tolerant.  Every call runs to completion and
  each key reports either a value or an error.

Each call is bounded by ``per_call_timeout`` and, optionally, by a shared
concurrency limit.  Any failure of a call -- timeout, transport error,
unexpected exception -- is normalised to :class:`AdapterUnavailableError`
tagged with the call's key.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable, Hashable, Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from impact_screening.domain.exceptions import AdapterUnavailableError

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
T = TypeVar("T")

CallFactory = Callable[[], Awaitable[T]]


@dataclass(frozen=True)
class Settled(Generic[T]):
    """Outcome of one call under :meth:`FanOut.settle`."""

    value: T | None = None
    error: AdapterUnavailableError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _label(key: Any) -> str:
    return str(getattr(key, "value", key))


class FanOut:
    """Runs keyed call factories concurrently.

    Parameters
    ----------
    per_call_timeout:
        Seconds each individual call may take.  ``None`` disables the bound.
    max_concurrency:
        Maximum number of calls in flight at once.  ``None`` means unbounded.
    """

    def __init__(
        self,
        per_call_timeout: float | None = 30.0,
        max_concurrency: int | None = None,
    ) -> None:
        if per_call_timeout is not None and per_call_timeout <= 0:
            raise ValueError(f"per_call_timeout must be > 0, got {per_call_timeout}")
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")
        self.per_call_timeout = per_call_timeout
        self.max_concurrency = max_concurrency

    def _limiter(self) -> Any:
        if self.max_concurrency is None:
            return None
        return asyncio.Semaphore(self.max_concurrency)

    async def _call(self, key: Any, factory: CallFactory[T], limiter: Any) -> T:
        label = _label(key)
        gate = limiter if limiter is not None else contextlib.nullcontext()
        try:
            async with gate:
                async with asyncio.timeout(self.per_call_timeout):
                    return await factory()
        except AdapterUnavailableError as exc:
            if not exc.adapter:
                exc.adapter = label
            raise
        except TimeoutError as exc:
            raise AdapterUnavailableError(
                f"{label} timed out after {self.per_call_timeout}s",
                adapter=label,
            ) from exc
        except Exception as exc:
            raise AdapterUnavailableError(f"{label} failed: {exc}", adapter=label) from exc

    async def all(self, calls: Mapping[K, CallFactory[T]]) -> dict[K, T]:
        """Run every call; return all values or raise the first failure.

        Raises
        ------
        AdapterUnavailableError
            The first call failure.  Remaining calls are cancelled.
        """
        limiter = self._limiter()
        tasks: dict[K, asyncio.Task[T]] = {}
        try:
            async with asyncio.TaskGroup() as tg:
                for key, factory in calls.items():
                    tasks[key] = tg.create_task(self._call(key, factory, limiter))
        except ExceptionGroup as group:
            failures = [
                exc for exc in group.exceptions if isinstance(exc, AdapterUnavailableError)
            ]
            if not failures:
                raise
            first = failures[0]
            logger.debug(
                "FanOut.all: %d of %d calls failed, first=%s",
                len(failures),
                len(calls),
                first.adapter,
            )
            raise first
        return {key: task.result() for key, task in tasks.items()}

    async def settle(self, calls: Mapping[K, CallFactory[T]]) -> dict[K, Settled[T]]:
        """Run every call to completion; never raises for a call failure."""
        limiter = self._limiter()

        async def run(key: K, factory: CallFactory[T]) -> Settled[T]:
            try:
                return Settled(value=await self._call(key, factory, limiter))
            except AdapterUnavailableError as exc:
                return Settled(error=exc)

        tasks: dict[K, asyncio.Task[Settled[T]]] = {}
        async with asyncio.TaskGroup() as tg:
            for key, factory in calls.items():
                tasks[key] = tg.create_task(run(key, factory))
        return {key: task.result() for key, task in tasks.items()}
